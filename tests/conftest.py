"""Pytest configuration and fixtures"""
import asyncio
import copy
import itertools
import os
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from postgrest.exceptions import APIError
from supabase import AuthError

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test_anon_key")

from storefront.auth.session import Identity, SessionProvider  # noqa: E402
from storefront.cart import CartManager  # noqa: E402
from storefront.services.models import Product  # noqa: E402
from storefront.services.repositories import CartRepository  # noqa: E402

EPOCH = datetime(2025, 1, 1, tzinfo=UTC)


class _Hold:
    """A pending request parked until the test releases it."""

    def __init__(self, table: str, op: str, filters: Dict[str, Any]):
        self.table = table
        self.op = op
        self.filters = filters
        self.event = asyncio.Event()
        self.reached = asyncio.Event()

    def matches(self, table: str, op: str, filters: Dict[str, Any]) -> bool:
        if table != self.table or op != self.op:
            return False
        return all(filters.get(k) == v for k, v in self.filters.items())

    def release(self) -> None:
        self.event.set()


class _FakeQuery:
    """Subset of the postgrest async request builder used by the repositories."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self._op = "select"
        self._columns = "*"
        self._payload: Any = None
        self._filters: Dict[str, Any] = {}
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None

    def select(self, columns: str = "*", **_):
        self._op = "select"
        self._columns = columns
        return self

    def insert(self, data):
        self._op = "insert"
        self._payload = data
        return self

    def update(self, data):
        self._op = "update"
        self._payload = data
        return self

    def upsert(self, data):
        self._op = "upsert"
        self._payload = data
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column: str, value):
        self._filters[column] = value
        return self

    def order(self, column: str, desc: bool = False):
        self._order = (column, desc)
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    async def execute(self):
        self.db.calls.append((self.table, self._op, dict(self._filters)))
        hold = self.db._take_hold(self.table, self._op, self._filters)
        if hold is not None:
            hold.reached.set()
            await hold.event.wait()
        # Yield once so concurrent requests interleave like real I/O
        await asyncio.sleep(0)
        failure = self.db._take_failure(self.table, self._op)
        if failure is not None:
            raise failure
        return SimpleNamespace(data=getattr(self, f"_run_{self._op}")(), count=None)

    def _matching(self) -> List[dict]:
        rows = self.db.tables.setdefault(self.table, [])
        return [r for r in rows if all(r.get(k) == v for k, v in self._filters.items())]

    def _run_select(self) -> List[dict]:
        rows = [copy.deepcopy(r) for r in self._matching()]
        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: r.get(column) or "", reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return [self.db._embed(self.table, row, self._columns) for row in rows]

    def _run_insert(self) -> List[dict]:
        payload = self._payload if isinstance(self._payload, list) else [self._payload]
        created = []
        for data in payload:
            self.db._check_unique(self.table, data)
            row = self.db._new_row(self.table, data)
            self.db.tables.setdefault(self.table, []).append(row)
            created.append(copy.deepcopy(row))
        return created

    def _run_update(self) -> List[dict]:
        updated = []
        for row in self._matching():
            row.update(self._payload)
            updated.append(copy.deepcopy(row))
        return updated

    def _run_upsert(self) -> List[dict]:
        rows = self.db.tables.setdefault(self.table, [])
        existing = next((r for r in rows if r["id"] == self._payload["id"]), None)
        if existing is not None:
            existing.update(self._payload)
            return [copy.deepcopy(existing)]
        row = self.db._new_row(self.table, self._payload)
        rows.append(row)
        return [copy.deepcopy(row)]

    def _run_delete(self) -> List[dict]:
        doomed = self._matching()
        self.db.tables[self.table] = [r for r in self.db.tables[self.table] if r not in doomed]
        return doomed


class FakeAuthError(AuthError):
    def __init__(self, message: str):
        Exception.__init__(self, message)
        self.message = message


class FakeAuth:
    """Stand-in for AsyncClient.auth with email/password accounts."""

    def __init__(self, accounts: Dict[str, tuple]):
        # email -> (user id, password)
        self.accounts = accounts
        self.current: Optional[SimpleNamespace] = None
        self.fail_sign_out = False

    async def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if account is None or account[1] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        self.current = SimpleNamespace(id=account[0], email=credentials["email"])
        return SimpleNamespace(user=self.current, session=SimpleNamespace(access_token="t"))

    async def sign_up(self, credentials):
        if credentials["email"] in self.accounts:
            raise FakeAuthError("User already registered")
        user_id = f"user-{len(self.accounts) + 1}"
        self.accounts[credentials["email"]] = (user_id, credentials["password"])
        self.current = SimpleNamespace(id=user_id, email=credentials["email"])
        return SimpleNamespace(user=self.current, session=SimpleNamespace(access_token="t"))

    async def sign_out(self):
        if self.fail_sign_out:
            raise FakeAuthError("network down")
        self.current = None

    async def get_user(self):
        if self.current is None:
            return None
        return SimpleNamespace(user=self.current)


class FakeSupabase:
    """In-memory Supabase project: tables, embeds, unique keys, failures and holds."""

    UNIQUE = {"cart_items": ("user_id", "product_id")}
    EMBEDS = {
        "products(*)": ("products", "product_id", "id", False),
        "order_items(*, products(*))": ("order_items", "id", "order_id", True),
    }

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.calls: List[tuple] = []
        self.auth = FakeAuth({"alice@example.com": ("user-a", "secret"), "bob@example.com": ("user-b", "secret")})
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        self._failures: List[tuple] = []
        self._holds: List[_Hold] = []

    def table(self, name: str) -> _FakeQuery:
        return _FakeQuery(self, name)

    # -- test controls --

    def fail_next(self, table: str, op: str, code: str = "PGRST301", message: str = "boom") -> None:
        self._failures.append((table, op, APIError({"code": code, "message": message, "hint": None, "details": None})))

    def hold(self, table: str, op: str, **filters) -> _Hold:
        hold = _Hold(table, op, filters)
        self._holds.append(hold)
        return hold

    def rows(self, table: str) -> List[dict]:
        return self.tables.get(table, [])

    def ops(self, table: str) -> List[str]:
        return [op for t, op, _ in self.calls if t == table]

    # -- internals --

    def _take_failure(self, table: str, op: str):
        for i, (t, o, error) in enumerate(self._failures):
            if t == table and o == op:
                del self._failures[i]
                return error
        return None

    def _take_hold(self, table: str, op: str, filters: Dict[str, Any]) -> Optional[_Hold]:
        for i, hold in enumerate(self._holds):
            if hold.matches(table, op, filters):
                del self._holds[i]
                return hold
        return None

    def _check_unique(self, table: str, data: dict) -> None:
        keys = self.UNIQUE.get(table)
        if not keys:
            return
        for row in self.tables.get(table, []):
            if all(row.get(k) == data.get(k) for k in keys):
                raise APIError({"code": "23505", "message": "duplicate key value", "hint": None, "details": None})

    def _new_row(self, table: str, data: dict) -> dict:
        stamp = (EPOCH + timedelta(seconds=next(self._clock))).isoformat()
        row = {"id": f"{table}-{next(self._ids)}", "created_at": stamp, "updated_at": stamp}
        row.update(copy.deepcopy(data))
        return row

    def _embed(self, table: str, row: dict, columns: str) -> dict:
        for embed, (other, local_key, remote_key, many) in self.EMBEDS.items():
            if embed not in columns:
                continue
            matches = [
                copy.deepcopy(r) for r in self.tables.get(other, [])
                if r.get(remote_key) == row.get(local_key)
            ]
            if many:
                if "products(*)" in embed:
                    matches = [self._embed(other, m, "products(*)") for m in matches]
                row[other] = matches
            elif table != other:
                row[other] = matches[0] if matches else None
        return row


@pytest.fixture
def fake_supabase():
    """Fake Supabase project seeded with a small catalog."""
    db = FakeSupabase()
    db.tables["categories"] = [
        {"id": "cat-fruit", "name": "Fruit", "slug": "fruit", "description": None, "image_url": None},
        {"id": "cat-dairy", "name": "Dairy", "slug": "dairy", "description": None, "image_url": None},
    ]
    db.tables["products"] = [
        {
            "id": "p1", "category_id": "cat-fruit", "name": "Alphonso Mango",
            "description": "Sweet summer mangoes", "price": 10, "original_price": 12.5,
            "stock": 40, "unit": "kg", "rating": 4.5, "review_count": 12,
            "is_featured": True, "is_available": True,
        },
        {
            "id": "p2", "category_id": "cat-dairy", "name": "Paneer",
            "description": "Fresh cottage cheese", "price": 25.5, "original_price": None,
            "stock": 10, "unit": "pack", "rating": 4.0, "review_count": 3,
            "is_featured": False, "is_available": True,
        },
        {
            "id": "p3", "category_id": "cat-fruit", "name": "Green Banana",
            "description": None, "price": 4, "original_price": None,
            "stock": 0, "unit": "dozen", "rating": 0, "review_count": 0,
            "is_featured": False, "is_available": False,
        },
    ]
    return db


@pytest.fixture
def product_p1(fake_supabase):
    return Product(**fake_supabase.tables["products"][0])


@pytest.fixture
def product_p2(fake_supabase):
    return Product(**fake_supabase.tables["products"][1])


@pytest.fixture
def alice():
    return Identity(id="user-a", email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(id="user-b", email="bob@example.com")


@pytest.fixture
def session(fake_supabase):
    return SessionProvider(fake_supabase.auth)


@pytest.fixture
def cart_manager(fake_supabase, session):
    manager = CartManager(CartRepository(fake_supabase), session)
    yield manager
    manager.detach()


@pytest_asyncio.fixture
async def signed_in_cart(cart_manager, session, alice):
    """Cart manager with alice signed in and her (empty) cart loaded."""
    session.set_identity(alice)
    await cart_manager.wait_until_synced()
    return cart_manager
