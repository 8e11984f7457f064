"""Client-side session holder implementing IdentityProvider"""
import logging
from typing import Callable, Optional

from nuvoria.services.observable import Observable

logger = logging.getLogger(__name__)


class SessionIdentityProvider:
    """
    Tracks the signed-in user id.

    The auth SDK adapter calls sign_in/sign_out; the service container
    subscribes to changes.
    """

    def __init__(self, user_id: Optional[str] = None):
        self._user = Observable(user_id, name="current_user")

    @property
    def current_user_id(self) -> Optional[str]:
        return self._user.value

    def subscribe(self, callback: Callable[[Optional[str]], None]) -> Callable[[], None]:
        return self._user.subscribe(callback)

    def sign_in(self, user_id: str) -> None:
        logger.info(f"User {user_id} signed in")
        self._user.set(user_id)

    def sign_out(self) -> None:
        if self._user.value is not None:
            logger.info(f"User {self._user.value} signed out")
        self._user.set(None)
