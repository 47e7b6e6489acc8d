"""Mapping from failed operation results to HTTP errors."""

from fastapi import HTTPException

from quicknotes.models import ErrorKind, OperationResult

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 409,
    ErrorKind.STALE: 409,
    ErrorKind.REMOTE: 502,
}


def raise_for_failure(result: OperationResult) -> None:
    if result.success:
        return
    status = _STATUS_BY_KIND.get(result.error_kind, 500)
    raise HTTPException(status, result.error or "Operation failed")
