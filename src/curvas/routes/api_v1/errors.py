from fastapi import HTTPException

from curvas.core.errors import CurvasError


def to_http(exc: CurvasError) -> HTTPException:
    """Classified error -> HTTPException with the same stable message."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)
