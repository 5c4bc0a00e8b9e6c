from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int
