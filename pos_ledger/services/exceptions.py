class LedgerError(Exception):
    """Base class for errors raised by the catalog, ledger and checkout services."""
    pass


class ValidationError(LedgerError):
    """Exception raised when input is malformed or out of range."""
    pass


class NotFoundError(LedgerError):
    """Exception raised when a product or transaction doesn't exist."""

    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with ID {identifier} not found")


class ConcurrencyConflict(LedgerError):
    """Exception raised when a guarded stock debit finds too little stock."""

    def __init__(self, product_id: int, requested: int, available: int = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        message = f"Insufficient stock for product {product_id}. Requested: {requested}"
        if available is not None:
            message += f", Available: {available}"
        super().__init__(message)


class StorageError(LedgerError):
    """Exception raised when the database rejects or fails a write."""
    pass
