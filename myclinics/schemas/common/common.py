# myclinics/schemas/common/common.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

class APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    code: Optional[str] = None
    errors: Optional[Dict[str, List[str]]] = None

class MessageResponse(BaseModel):
    success: bool = True
    message: str

class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int

class PaginatedEnvelope(BaseModel, Generic[T]):
    success: bool = True
    data: List[T] = Field(default_factory=list)
    pagination: Pagination
