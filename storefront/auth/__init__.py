"""Auth package: identity model and session provider."""
from .session import Identity, SessionProvider

__all__ = ["Identity", "SessionProvider"]
