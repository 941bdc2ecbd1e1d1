from typing import Optional


class LedgerError(Exception):
    """Base class for errors raised by the ledger services."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NotFoundError(LedgerError):
    pass


class ImmutableRecordError(LedgerError):
    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class StoreError(LedgerError):
    """Persistence failure; the failed unit of work has been rolled back."""
    pass
