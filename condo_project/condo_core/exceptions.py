from django.core.exceptions import ValidationError

# Domain errors subclass ValidationError so that model clean(),
# services, admin actions and views all catch one type


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not in the allowed transition table."""
    pass


class PeriodClosedError(ValidationError):
    """Raised when writing ledger rows or dues into a closed fiscal period."""
    pass


class RolloverError(ValidationError):
    """Raised when the closing/new period pair cannot be rolled over."""
    pass


class ImportStateError(ValidationError):
    """Raised when a ledger import step is run out of order."""
    pass


class ExchangeRateUnavailable(ValidationError):
    """Raised when no exchange rate can be found (or fetched) for a currency/date."""
    pass


class UnitsAlreadyOwnedError(ValidationError):
    """Raised when a resident claims units that already have an owner."""

    def __init__(self, conflicts):
        self.conflicts = list(conflicts)
        super().__init__("Some units are already owned")
