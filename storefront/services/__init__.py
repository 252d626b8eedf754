"""Data access: row models, money helpers, repositories and domain services."""
