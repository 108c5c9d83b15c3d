import time
from typing import Callable, Optional

from loguru import logger

from alumnet.services.auth_client import AuthClient, AuthUser


class SessionProvider:
    """
    Current identity and a usable bearer token for one caller.

    Every method degrades to None/False on failure and logs; nothing
    raises to the caller.
    """

    def __init__(self, auth: AuthClient, clock: Callable[[], float] = time.time):
        self.auth = auth
        self._clock = clock

    def get_valid_token(self) -> Optional[str]:
        try:
            session = self.auth.get_session()
            if session is None:
                logger.warning("[session] no valid session found")
                return None

            now = int(self._clock())
            if session.expires_at is not None and session.expires_at <= now:
                logger.debug(f"[session] token expired at {session.expires_at}, refreshing")
                refreshed = self.auth.refresh_session()
                if refreshed is None:
                    logger.warning("[session] refresh returned no session")
                    return None
                return refreshed.access_token

            return session.access_token
        except Exception:
            logger.exception("[session] error getting valid token")
            return None

    def verify_token(self, token: str) -> bool:
        try:
            return self.auth.get_user(token) is not None
        except Exception:
            logger.exception("[session] token verification failed")
            return False

    def get_current_user(self) -> Optional[AuthUser]:
        try:
            return self.auth.get_user()
        except Exception:
            logger.exception("[session] error getting current user")
            return None
