"""Response wrapper shared by every route."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Every payload is returned under ``data``."""

    data: T
