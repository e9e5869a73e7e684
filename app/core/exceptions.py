"""
Domain errors raised by the settlement services.

Each error carries the HTTP status and a short machine code so the API layer
can render it without knowing the individual error types.
"""
from typing import Optional


class SettlementError(Exception):
    """Base class for all settlement domain errors."""
    status_code = 400
    code = "settlement_error"
    
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidYearMonthError(SettlementError):
    """Year-month string is not in YYYY-MM form."""
    code = "invalid_year_month"
    
    def __init__(self, value):
        super().__init__(f"Invalid year-month '{value}', expected YYYY-MM")
        self.value = value


class SettlementLockedError(SettlementError):
    """Re-allocation attempted on a confirmed or paid settlement."""
    status_code = 409
    code = "settlement_locked"
    
    def __init__(self, partner_id: int, year_month: str, status: str):
        super().__init__(
            f"Settlement for partner {partner_id} in {year_month} is already {status} "
            f"and cannot be re-allocated"
        )
        self.partner_id = partner_id
        self.year_month = year_month
        self.status = status


class InvalidTransitionError(SettlementError):
    """Requested status change is not allowed by the lifecycle."""
    code = "invalid_transition"
    
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change settlement status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class MissingPaymentRefError(SettlementError):
    """Payment marked without a payment reference."""
    code = "missing_payment_ref"
    
    def __init__(self, settlement_id: Optional[int] = None):
        super().__init__("A payment reference is required to mark a settlement as paid")
        self.settlement_id = settlement_id


class ConcurrentModificationError(SettlementError):
    """Settlement status changed underneath the current request."""
    status_code = 409
    code = "concurrent_modification"
    
    def __init__(self, settlement_id: int, expected: str):
        super().__init__(
            f"Settlement {settlement_id} is no longer '{expected}'; reload and try again"
        )
        self.settlement_id = settlement_id
        self.expected = expected


class NotFoundError(SettlementError):
    """Base class for missing rows."""
    status_code = 404
    code = "not_found"


class SettlementNotFoundError(NotFoundError):
    code = "settlement_not_found"
    
    def __init__(self, settlement_id: int):
        super().__init__("Settlement not found")
        self.settlement_id = settlement_id


class PartnerNotFoundError(NotFoundError):
    code = "partner_not_found"
    
    def __init__(self, partner_id: int):
        super().__init__("Partner not found")
        self.partner_id = partner_id


class ContractNotFoundError(NotFoundError):
    code = "partner_track_not_found"
    
    def __init__(self, partner_id: int, track_id: int):
        super().__init__("Partner track not found")
        self.partner_id = partner_id
        self.track_id = track_id


class NotificationNotFoundError(NotFoundError):
    code = "notification_not_found"
    
    def __init__(self, notification_id: int):
        super().__init__("Notification not found")
        self.notification_id = notification_id


class TrackNotFoundError(NotFoundError):
    code = "track_not_found"
    
    def __init__(self, track_id: int):
        super().__init__("Track not found")
        self.track_id = track_id
