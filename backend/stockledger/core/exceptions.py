"""
Domain exceptions and their HTTP mapping.

Services raise these; the handlers registered in ``stockledger.main`` turn
them into the standard response envelope, so routers never catch them.
"""
from typing import Any, Optional

from fastapi import HTTPException, status

from stockledger.config import settings


class StockLedgerException(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationException(StockLedgerException):
    """Missing field, unknown reference or bad quantity."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class ReferenceNotFoundException(ValidationException):
    """A referenced collaborator (supplier, bill, ...) does not exist."""

    def __init__(self, entity: str, code: Any, field: Optional[str] = None):
        self.entity = entity
        self.code = code
        super().__init__(f"{entity} '{code}' not found", field=field)


class EntityNotFoundException(StockLedgerException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, code: Any):
        self.entity = entity
        self.code = code
        super().__init__(f"{entity} '{code}' not found")


class ConflictException(StockLedgerException):
    """Duplicate code, or a delete blocked by dependent rows."""

    error_code = "CONFLICT"

    @property
    def status_code(self) -> int:
        return settings.CONFLICT_HTTP_STATUS


class DuplicateCodeException(ConflictException):
    def __init__(self, entity: str, code: str):
        self.entity = entity
        self.code = code
        super().__init__(f"{entity} code '{code}' already exists")


def to_http_exception(exc: StockLedgerException) -> HTTPException:
    detail = {"code": exc.error_code, "message": exc.message}
    field = getattr(exc, "field", None)
    if field:
        detail["field"] = field
    return HTTPException(status_code=exc.status_code, detail=detail)
