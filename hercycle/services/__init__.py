"""Service layer package."""

__all__ = [
    "auth_service",
    "doctor_service",
    "verification_service",
    "notification_service",
    "email_service",
    "storage_service",
]
