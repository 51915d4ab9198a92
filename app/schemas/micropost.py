"""Pydantic schemas for micropost endpoints."""

from datetime import datetime

from pydantic import BaseModel


class MicropostResponse(BaseModel):
    id: int
    content: str
    user_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class FeedResponse(BaseModel):
    items: list[MicropostResponse]
    total: int
