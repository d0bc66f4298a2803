"""Session-scoped persistence for the cart and its checkout state."""
import json
from typing import Optional

from pydantic import ValidationError

from portal.db import RedisKeys, SessionStorage, TTL
from portal.errors import ERROR_STORAGE_UNAVAILABLE, StorageError
from portal.logging import get_logger, mask_token
from .checkout import CheckoutState
from .models import Cart

logger = get_logger(__name__)

# Anything a malformed record can raise while being decoded
DECODE_ERRORS = (
    json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError, ArithmeticError, ValidationError,
)


class _SessionRecord:
    """One key in the session storage, with storage failures mapped to StorageError."""

    def __init__(self, storage: SessionStorage, session_id: str, key: str, ttl: int = TTL.SESSION):
        self.storage = storage
        self.session_id = session_id
        self.key = key
        self.ttl = ttl

    async def _call(self, method: str, *args):
        try:
            return await getattr(self.storage, method)(*args)
        except Exception as e:
            logger.error("Session storage %s failed: %s", method, e)
            raise StorageError(ERROR_STORAGE_UNAVAILABLE) from e


class CartStore(_SessionRecord):
    """
    Holds one browser session's cart record.

    The record is a JSON array of line items under a fixed key and is
    overwritten wholesale on every save (last writer wins).
    """

    def __init__(self, storage: SessionStorage, session_id: str, ttl: int = TTL.SESSION):
        super().__init__(storage, session_id, RedisKeys.cart_key(session_id), ttl)

    async def load(self) -> Cart:
        """
        Read the cart. Never raises for bad data.

        Missing record -> empty cart. Corrupt record -> the record is deleted
        and an empty cart flagged `recovered` is returned.
        """
        raw = await self._call("get", self.key)
        if not raw:
            return Cart()

        try:
            return Cart.from_list(json.loads(raw))
        except DECODE_ERRORS as e:
            logger.warning(
                "Corrupted cart data for session %s: %s",
                mask_token(self.session_id), e,
            )
            await self._call("delete", self.key)
            return Cart(recovered=True)

    async def save(self, cart: Cart) -> None:
        """Overwrite the stored cart with the full line item sequence."""
        await self._call("set", self.key, json.dumps(cart.to_list()), self.ttl)

    async def clear(self) -> None:
        await self._call("delete", self.key)


class CheckoutStateStore(_SessionRecord):
    """Holds the checkout state for one browser session, next to the cart."""

    def __init__(self, storage: SessionStorage, session_id: str, ttl: int = TTL.SESSION):
        super().__init__(storage, session_id, RedisKeys.checkout_key(session_id), ttl)

    async def load(self) -> Optional[CheckoutState]:
        raw = await self._call("get", self.key)
        if not raw:
            return None
        try:
            return CheckoutState(raw)
        except ValueError:
            logger.warning(
                "Unknown checkout state %r for session %s",
                raw, mask_token(self.session_id),
            )
            return None

    async def save(self, state: CheckoutState) -> None:
        await self._call("set", self.key, state.value, self.ttl)

    async def clear(self) -> None:
        await self._call("delete", self.key)
