"""Profile Repository - address book keyed by auth user id."""
from datetime import UTC, datetime
from typing import Any, Dict, Optional

from storefront.db import Tables
from storefront.services.models import Profile

from .base import BaseRepository


class ProfileRepository(BaseRepository):
    """profiles database operations."""

    table_name = Tables.PROFILES

    async def get(self, user_id: str) -> Optional[Profile]:
        async with self.reading():
            result = await self.table().select("*").eq("id", user_id).execute()
            return Profile(**result.data[0]) if result.data else None

    async def upsert(self, user_id: str, email: str, details: Dict[str, Any]) -> None:
        """Insert or update the user's profile with contact/shipping details."""
        data = {
            "id": user_id,
            "email": email,
            **details,
            "updated_at": datetime.now(UTC).isoformat(),
        }
        async with self.writing():
            await self.table().upsert(data).execute()
