from fastapi import HTTPException, status

from pos_ledger.services.exceptions import (
    LedgerError,
    ValidationError,
    NotFoundError,
    ConcurrencyConflict,
    StorageError,
)

STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConcurrencyConflict: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(exc: LedgerError) -> HTTPException:
    """Translate a service error into the HTTPException a router raises."""
    status_code = STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=status_code, detail=str(exc))
