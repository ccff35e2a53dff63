# /classroom-ai-backend/app/routers/result_handling.py

"""
Where a failed `Result` becomes something the user sees. Storage faults
block the action with a 503; config faults are a 404 or a 400 the client
can re-prompt on.
"""

from fastapi import HTTPException, status

from ..services.result import Result, ErrorKind

STORAGE_ERROR_DETAIL = "Your changes could not be saved. Please try again."


def status_for(result: Result) -> int:
    if result.error is ErrorKind.STORAGE:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if result.error is ErrorKind.CONFIG:
        if "not found" in result.message.lower():
            return status.HTTP_404_NOT_FOUND
        return status.HTTP_400_BAD_REQUEST
    if result.error is ErrorKind.AUTH:
        return status.HTTP_401_UNAUTHORIZED
    return status.HTTP_502_BAD_GATEWAY


def unwrap(result: Result):
    """Returns the value of a successful Result or raises the matching HTTPException."""
    if result.ok:
        return result.value
    detail = STORAGE_ERROR_DETAIL if result.error is ErrorKind.STORAGE else result.message
    raise HTTPException(status_code=status_for(result), detail=detail)
