from typing import Any

class StOnboardingError(Exception):
    """Base exception for st-onboarding."""

    pass

class UnknownFieldError(StOnboardingError, ValueError):
    """Raised when a field name is not declared on the form."""

    def __init__(self, form_name: str, field: str):
        super().__init__(f"Field '{field}' is not defined in the form '{form_name}'.")
        self.field = field

class InvalidSnapshotError(StOnboardingError):
    """Raised when a stored snapshot does not have the expected shape."""

    def __init__(self, reason: str, value: Any = None):
        super().__init__(f"Invalid snapshot: {reason} (got {value!r})")
        self.reason = reason

class StorageError(StOnboardingError):
    """Raised by storage backends when a read, write or delete fails."""

    def __init__(self, operation: str, key: str, original_error: Exception):
        super().__init__(f"Storage {operation} failed for key '{key}': {original_error}")
        self.operation = operation
        self.key = key
