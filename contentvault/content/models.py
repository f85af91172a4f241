from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ContentType = Literal["image", "video", "audio", "document"]
InteractionType = Literal["view", "like", "purchase", "tip", "share", "bookmark"]

CONTENT_TYPES: list[str] = ["image", "video", "audio", "document"]


class ContentRecord(BaseModel):
    id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    creator_address: str
    type: str = "image"
    walrus_blob_id: str
    encryption_key: str
    price: float = Field(default=0.0, ge=0.0)
    is_public: bool = False
    is_featured: bool = False
    upload_timestamp: float = Field(default_factory=time.time)
    access_expiration: float = 0.0  # seconds per purchase, 0 = never expires
    total_earnings: float = 0.0
    access_count: int = 0
    is_active: bool = True
    tags: list[str] = Field(default_factory=list)

    @field_validator("creator_address")
    @classmethod
    def _lower_address(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("tags")
    @classmethod
    def _normalise_tags(cls, v: list[str]) -> list[str]:
        return [t.strip().lower() for t in v if t and t.strip()]


class ContentOut(BaseModel):
    """Public view of a content record. Never carries the encryption key."""

    id: str
    title: str
    description: str
    creator_address: str
    type: str
    walrus_blob_id: str
    price: float
    is_public: bool
    is_featured: bool
    upload_timestamp: float
    total_earnings: float
    access_count: int
    tags: list[str]

    @classmethod
    def from_record(cls, record: ContentRecord) -> "ContentOut":
        return cls(**record.model_dump(exclude={"encryption_key", "access_expiration", "is_active"}))


class ContentPage(BaseModel):
    data: list[ContentOut]
    total_pages: int
    current_page: int
    total: int
    has_more: bool


class ContentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=1000)
    type: ContentType
    walrus_blob_id: str = Field(..., min_length=1)
    price: float = Field(default=0.0, ge=0.0)
    is_public: bool = False
    access_expiration: float = Field(default=0.0, ge=0.0)
    tags: list[str] = Field(default_factory=list)


class ContentUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    price: float | None = Field(default=None, ge=0.0)
    is_public: bool | None = None


class Interaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_id: str
    content_type: str | None = None
    content_price: float = 0.0
    creator_address: str | None = None
    type: str
    timestamp: float = Field(default_factory=time.time)
    user_address: str = ""
    amount: float = 0.0


class InteractionRequest(BaseModel):
    content_id: str = Field(..., min_length=1)
    type: Literal["view", "like", "share", "bookmark"]


class PurchaseRequest(BaseModel):
    price: float = Field(..., ge=0.0)


class TipRequest(BaseModel):
    amount: float = Field(..., gt=0.0)


class AccessResponse(BaseModel):
    content_id: str
    walrus_blob_id: str
    encryption_key: str
