"""
Error taxonomy for the job endpoints.

Every error is an HTTPException so FastAPI turns it into a response; the
handlers registered in main.py render all of them as {"error": "<message>"}.
"""

from fastapi import HTTPException, status


class BadRequest(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InternalError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def format_validation_errors(errors) -> str:
    """Flatten pydantic error dicts into "field: message; field: message"."""
    messages = []
    for error in errors:
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")
        )
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages)
