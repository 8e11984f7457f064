"""Nuvoria progression & celebration core"""

__version__ = "0.1.0"
