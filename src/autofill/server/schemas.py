from __future__ import annotations

from pydantic import BaseModel, Field, HttpUrl


class OpenRequest(BaseModel):
    url: HttpUrl


class OpenResponse(BaseModel):
    url: str


class MessageResponse(BaseModel):
    response: str | None = Field(default=None, description="null on success, otherwise the error message")
