"""Pydantic schemas for merge responses."""

from pydantic import BaseModel


class MergeResultSchema(BaseModel):
    success: bool
    url: str


class MergeErrorSchema(BaseModel):
    status: str
    failure_reason: str
    message: str | None = None
