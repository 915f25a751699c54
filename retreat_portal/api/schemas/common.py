from __future__ import annotations

from pydantic import BaseModel


class PaginationMetaResponse(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool


class CreatedResponse(BaseModel):
    id: int
    message: str


class UpdatedResponse(BaseModel):
    success: bool = True
    message: str
    id: int


class DeletedResponse(BaseModel):
    success: bool = True
    message: str
