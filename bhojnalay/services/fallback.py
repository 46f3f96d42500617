"""
Remote-first store wrapper that falls back to local storage on failure
"""
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from bhojnalay.utils.logger import get_logger

logger = get_logger(__name__)

# Failures of the remote datastore that are absorbed at the store boundary
REMOTE_ERRORS = (SQLAlchemyError, OSError)


class FallbackStore:
    """Runs each call against the primary store, then the fallback if it errors.

    The failed call is not retried against the primary.
    """

    def __init__(self, primary: Any, fallback: Any):
        self.primary = primary
        self.fallback = fallback

    async def _call(self, method: str, *args: Any) -> Any:
        try:
            return await getattr(self.primary, method)(*args)
        except REMOTE_ERRORS as e:
            logger.error(f"Remote {method} failed, using local storage: {e}")
            return await getattr(self.fallback, method)(*args)

    async def _call_or_fallback(self, method: str, *args: Any) -> Any:
        """Like _call, but a falsy primary result also tries the fallback.

        Used for id-addressed writes: an entry logged locally during an
        outage is unknown to the primary.
        """
        try:
            result = await getattr(self.primary, method)(*args)
        except REMOTE_ERRORS as e:
            logger.error(f"Remote {method} failed, using local storage: {e}")
            return await getattr(self.fallback, method)(*args)
        if result:
            return result
        return await getattr(self.fallback, method)(*args)
