"""Base repository with shared Supabase client and error translation."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase._async.client import AsyncClient

from storefront.errors import RemoteReadFailed, RemoteWriteFailed
from storefront.logging import get_logger

logger = get_logger(__name__)


class BaseRepository:
    """Base class for all repositories.

    All methods are coroutines and await the query builder's ``execute()``.
    PostgREST and transport errors leave a repository only as
    RemoteReadFailed / RemoteWriteFailed, as do rows that fail model
    validation on read.
    """

    table_name: str = ""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    def table(self):
        return self.client.table(self.table_name)

    @asynccontextmanager
    async def reading(self) -> AsyncIterator[None]:
        try:
            yield
        except APIError as e:
            logger.warning(f"Read from {self.table_name} rejected: {e.message}")
            raise RemoteReadFailed(table=self.table_name) from e
        except httpx.HTTPError as e:
            logger.warning(f"Read from {self.table_name} failed: {e}")
            raise RemoteReadFailed(table=self.table_name) from e
        except ValidationError as e:
            logger.warning(f"Malformed {self.table_name} row: {e.error_count()} errors")
            raise RemoteReadFailed(table=self.table_name) from e

    @asynccontextmanager
    async def writing(self) -> AsyncIterator[None]:
        try:
            yield
        except APIError as e:
            logger.error(f"Write to {self.table_name} rejected: [{e.code}] {e.message}")
            raise RemoteWriteFailed(table=self.table_name, code=e.code, detail=e.message) from e
        except httpx.HTTPError as e:
            logger.error(f"Write to {self.table_name} failed: {e}")
            raise RemoteWriteFailed(table=self.table_name, detail=str(e)) from e
