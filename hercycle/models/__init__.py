"""ORM models package."""

__all__ = [
    "user",
    "doctor",
    "verification",
    "notification",
    "session",
    "audit",
]
