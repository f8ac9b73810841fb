"""
Uniform response envelope returned by every API handler
"""

from typing import Any, Generic, Optional, TypeVar
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

T = TypeVar("T")

class Envelope(BaseModel, Generic[T]):
    """Response wrapper: {success, data?, message?}

    A failed envelope never carries data; absent fields are dropped from the
    JSON body rather than rendered as null.
    """
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "Envelope":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str) -> "Envelope":
        return cls(success=False, message=message)

    def to_response(self, status_code: int = 200) -> JSONResponse:
        """Render as a JSON response with None fields omitted"""
        return JSONResponse(
            status_code=status_code,
            content=jsonable_encoder(self, by_alias=True, exclude_none=True)
        )
