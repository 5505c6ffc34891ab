"""Error taxonomy shared by the lifecycle engine and the HTTP layer.

``ValidationError`` and ``NotFoundError`` describe caller mistakes and are never
retried. ``StoreError`` wraps a failure of the database; batch operations fill
in ``completed`` so a caller can decide whether to retry the remainder.
"""


class InventoryError(Exception):
    """Base class for errors raised by the inventory core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """Input rejected by a business rule.

    ``errors`` maps a field name, a batch index or an equipment id to the
    reason it was rejected.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None):
        super().__init__(message)
        self.errors = errors or {}


class NotFoundError(InventoryError):
    pass


class StoreError(InventoryError):
    def __init__(self, message: str, completed: int = 0):
        super().__init__(message)
        self.completed = completed
