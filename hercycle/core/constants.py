"""Application constants: roles, account states and the verification lifecycle."""
from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    DOCTOR = "doctor"
    ADMIN = "admin"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# pending is the only state with outgoing edges; approved and rejected are terminal
VERIFICATION_TRANSITIONS: dict[VerificationStatus, frozenset[VerificationStatus]] = {
    VerificationStatus.PENDING: frozenset({VerificationStatus.APPROVED, VerificationStatus.REJECTED}),
    VerificationStatus.APPROVED: frozenset(),
    VerificationStatus.REJECTED: frozenset(),
}

# A doctor may hold at most one record in these states
ACTIVE_VERIFICATION_STATUSES = (VerificationStatus.PENDING, VerificationStatus.APPROVED)

BLOCKED_ACCOUNT_STATUSES = (AccountStatus.SUSPENDED, AccountStatus.DELETED)

ALLOWED_LICENSE_EXTENSIONS = (".pdf", ".jpeg", ".jpg", ".png")
ALLOWED_LICENSE_CONTENT_TYPES = ("application/pdf", "image/jpeg", "image/jpg", "image/png")
