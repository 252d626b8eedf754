"""Cart manager: in-memory projection of the signed-in user's cart_items rows."""
import asyncio
from datetime import UTC, datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple

from storefront.auth.session import Identity, SessionProvider
from storefront.errors import ERROR_INVALID_QUANTITY, NotAuthenticated, RemoteReadFailed, RemoteWriteFailed
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.models import Product
from storefront.services.money import money_sum, round_money, to_float
from storefront.services.repositories import CartRepository

from .models import CartLine

logger = get_logger(__name__)


class CartManager:
    """
    Keeps the current identity's cart lines in sync with the remote store.

    Features:
    - Refetch on every identity change; results of fetches superseded by a
      newer identity change (or a newer fetch) are discarded
    - Write-through mutations: local state changes only after the remote
      write is confirmed
    - One line per product: adding a product already in the cart bumps the
      existing line's quantity
    - Per-line sequencing: a quantity confirmation older than one already
      applied to the same line is ignored
    """

    def __init__(self, repository: CartRepository, session: Optional[SessionProvider] = None):
        self.repository = repository
        self._items: Tuple[CartLine, ...] = ()
        self._identity: Optional[Identity] = None

        # Bumped on every identity change; in-flight work tagged with an
        # older generation never touches local state
        self._generation = 0
        self._fetches_in_flight = 0
        self._fetch_seq = 0
        self._applied_fetch_seq = 0
        self._sync_task: Optional[asyncio.Task] = None

        # line id -> last issued / last applied quantity request
        self._issued: Dict[str, int] = {}
        self._applied: Dict[str, int] = {}

        self._unsubscribe = None
        if session is not None:
            self.attach(session)

    def attach(self, session: SessionProvider) -> None:
        """Follow `session`'s identity from now on."""
        self._unsubscribe = session.subscribe(self.on_identity_change)
        if session.identity is not None:
            self.on_identity_change(session.identity)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._sync_task is not None and not self._sync_task.done():
            self._sync_task.cancel()
        self._sync_task = None
        # Cancelled fetches then skip their in-flight bookkeeping
        self._generation += 1
        self._fetches_in_flight = 0

    def on_identity_change(self, identity: Optional[Identity]) -> None:
        """
        Identity listener.

        A new identity starts a background fetch, so it must be delivered from
        within a running event loop. Outside one this raises RuntimeError and
        leaves the cart untouched.
        """
        loop = asyncio.get_running_loop() if identity is not None else None
        self._generation += 1
        self._identity = identity
        self._items = ()
        self._fetches_in_flight = 0
        self._issued.clear()
        self._applied.clear()

        if identity is None:
            self._sync_task = None
            return

        generation = self._generation
        seq = self._begin_fetch()
        self._sync_task = loop.create_task(
            self._background_sync(generation, identity, seq)
        )

    @property
    def items(self) -> Tuple[CartLine, ...]:
        return self._items

    @property
    def loading(self) -> bool:
        return self._fetches_in_flight > 0

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    def total(self) -> Decimal:
        """Sum of price x quantity over the current lines, recomputed per call."""
        return money_sum(line.total_price for line in self._items)

    def count(self) -> int:
        """Sum of quantities over the current lines."""
        return sum(line.quantity for line in self._items)

    def find_line(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self._items if line.product_id == product_id), None)

    def get_line(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self._items if line.id == line_id), None)

    def summary(self) -> dict:
        """Cart summary for display."""
        if not self._items:
            return {"is_empty": True, "total_items": 0, "items": [], "total": 0.0}
        return {
            "is_empty": False,
            "total_items": self.count(),
            "items": [line.to_dict() for line in self._items],
            "total": to_float(round_money(self.total())),
        }

    async def refresh(self) -> None:
        """
        Refetch the current identity's lines.

        Raises:
            RemoteReadFailed: prior items are kept
        """
        if self._identity is None:
            return
        await self._fetch(self._generation, self._identity, self._begin_fetch())

    async def wait_until_synced(self) -> None:
        """Wait for the fetch started by the latest identity change."""
        while self._sync_task is not None and not self._sync_task.done():
            await asyncio.wait({self._sync_task})

    async def _background_sync(self, generation: int, identity: Identity, seq: int) -> None:
        try:
            await self._fetch(generation, identity, seq)
        except RemoteReadFailed:
            logger.warning(
                f"Cart fetch failed for user {sanitize_id_for_logging(identity.id)}, keeping prior items"
            )

    def _begin_fetch(self) -> int:
        """Count a fetch as outstanding and return its sequence number."""
        self._fetch_seq += 1
        self._fetches_in_flight += 1
        return self._fetch_seq

    async def _fetch(self, generation: int, identity: Identity, seq: int) -> None:
        try:
            rows = await self.repository.get_for_user(identity.id)
        finally:
            if generation == self._generation:
                self._fetches_in_flight -= 1

        if generation != self._generation:
            logger.debug(f"Discarding cart fetch from superseded generation {generation}")
            return
        if seq < self._applied_fetch_seq:
            logger.debug(f"Discarding cart fetch {seq}, newer fetch already applied")
            return

        self._applied_fetch_seq = seq
        self._items = tuple(CartLine.from_row(row) for row in rows)

    def _require_identity(self) -> Identity:
        if self._identity is None:
            raise NotAuthenticated()
        return self._identity

    async def add(self, product: Product, quantity: int = 1) -> None:
        """Add `quantity` units of `product`, merging with an existing line."""
        identity = self._require_identity()
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(ERROR_INVALID_QUANTITY)

        existing = self.find_line(product.id)
        if existing is not None:
            await self.set_quantity(existing.id, existing.quantity + quantity)
            return

        generation = self._generation
        try:
            await self.repository.insert(identity.id, product.id, quantity)
        except RemoteWriteFailed as e:
            if not e.is_conflict:
                raise
            # Another session added this product since our last fetch
            logger.info(f"Cart line for product {sanitize_id_for_logging(product.id)} exists remotely, merging")
            await self._fetch(generation, identity, self._begin_fetch())
            existing = self.find_line(product.id)
            if existing is None or generation != self._generation:
                raise
            await self.set_quantity(existing.id, existing.quantity + quantity)
            return

        # Refetch so the new line arrives with its product snapshot
        await self._fetch(generation, identity, self._begin_fetch())

    async def set_quantity(self, line_id: str, quantity: int) -> None:
        """Set a line's quantity. Zero or less removes the line."""
        if quantity <= 0:
            await self.remove(line_id)
            return

        self._require_identity()
        generation = self._generation
        seq = self._issued.get(line_id, 0) + 1
        self._issued[line_id] = seq

        await self.repository.update_quantity(line_id, quantity)

        if generation != self._generation:
            return
        if seq <= self._applied.get(line_id, 0):
            logger.debug(f"Ignoring out-of-order quantity confirmation for line {sanitize_id_for_logging(line_id)}")
            return
        self._applied[line_id] = seq

        now = datetime.now(UTC)
        self._items = tuple(
            line.with_quantity(quantity, now) if line.id == line_id else line
            for line in self._items
        )

    async def remove(self, line_id: str) -> None:
        """Remove a line. Removing a line that is already gone succeeds."""
        self._require_identity()
        generation = self._generation

        await self.repository.delete(line_id)

        if generation != self._generation:
            return
        self._items = tuple(line for line in self._items if line.id != line_id)
        self._issued.pop(line_id, None)
        self._applied.pop(line_id, None)

    async def clear(self, expected: Optional[Identity] = None) -> bool:
        """
        Delete every line of the current identity.

        With `expected`, only clears while that identity is still the current
        one. Returns False when nothing was cleared (signed out, or the
        identity changed).
        """
        identity = self._identity
        if identity is None:
            return False
        if expected is not None and expected.id != identity.id:
            logger.warning(
                f"Not clearing cart of user {sanitize_id_for_logging(identity.id)}, "
                f"expected {sanitize_id_for_logging(expected.id)}"
            )
            return False
        generation = self._generation

        await self.repository.delete_for_user(identity.id)

        if generation != self._generation:
            return True
        self._items = ()
        self._issued.clear()
        self._applied.clear()
        logger.info(f"Cart cleared for user {sanitize_id_for_logging(identity.id)}")
        return True
