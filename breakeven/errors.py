# breakeven/errors.py
"""
Error types raised by the services.

Routers never build HTTP errors for these by hand; main.py registers one
exception handler per class and turns them into JSON responses.
"""


class BreakEvenError(Exception):
    """Base class for every error the services raise on purpose."""

    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)
        self.message = message


class InvalidInputError(BreakEvenError, ValueError):
    """Bad amount, date, mode, category or timezone. Raised before any write."""

    status_code = 422

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class NotFoundError(BreakEvenError):
    status_code = 404

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class StorageUnavailableError(BreakEvenError):
    """The database failed mid-call. Retrying the whole call is safe."""

    status_code = 503

    def __init__(self, message: str = "Storage unavailable"):
        super().__init__(message)


class LedgerGapError(BreakEvenError):
    """Strict mode only: the previous day's ledger is missing mid-history."""

    status_code = 500

    def __init__(self, budget_id: int, missing_date):
        super().__init__(
            f"Ledger for budget {budget_id} is missing on {missing_date.isoformat()}"
        )
        self.budget_id = budget_id
        self.missing_date = missing_date
