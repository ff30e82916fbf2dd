"""Global enums — string values are the stable codes exposed to the UI layer."""

from enum import Enum


class FailureReason(str, Enum):
    """Reason codes carried by every error and every Failed bet state."""
    # Input validation
    INVALID_STAKE = "INVALID_STAKE"
    INVALID_OUTCOME = "INVALID_OUTCOME"
    INVALID_PROTECTION_LEVEL = "INVALID_PROTECTION_LEVEL"
    INVALID_ODDS = "INVALID_ODDS"
    MARKET_CLOSED = "MARKET_CLOSED"
    MARKET_NOT_FOUND = "MARKET_NOT_FOUND"
    # Chain collaboration
    SUBMISSION_REJECTED = "SUBMISSION_REJECTED"
    CONFIRMATION_FAILED = "CONFIRMATION_FAILED"
    QUOTE_MISMATCH = "QUOTE_MISMATCH"
    USER_CANCELLED = "USER_CANCELLED"
    # Caller misuse
    ALREADY_IN_PROGRESS = "ALREADY_IN_PROGRESS"
    BET_NOT_FOUND = "BET_NOT_FOUND"
    # Market model
    UNKNOWN_OUTCOME = "UNKNOWN_OUTCOME"
    MARKET_ALREADY_RESOLVED = "MARKET_ALREADY_RESOLVED"
    ALREADY_RESOLVED = "ALREADY_RESOLVED"
    MARKET_NOT_RESOLVED = "MARKET_NOT_RESOLVED"
    # System
    INTERNAL = "INTERNAL"


class BetStatus(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    AWAITING_SUBMISSION = "AWAITING_SUBMISSION"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


class ChainStatus(str, Enum):
    """Confirmation status reported by the chain collaborator for a pending handle."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


class TokenVersion(str, Enum):
    V1 = "V1"
    V2 = "V2"
    V3 = "V3"
    V4 = "V4"
    V5 = "V5"


class MarketStatus(str, Enum):
    """Listing filter: ACTIVE is unresolved and not yet ended; RESOLVED has a winner."""
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
