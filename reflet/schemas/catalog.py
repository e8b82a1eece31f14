# reflet/schemas/catalog.py
from __future__ import annotations
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from reflet.models.catalog import GALLERY_CATEGORIES, PRODUCT_CATEGORIES


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=160)
    description: Optional[str] = None
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    category: str = "artisanat"
    image_url: Optional[str] = Field(None, max_length=1024)
    in_stock: bool = True

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        if v not in PRODUCT_CATEGORIES:
            raise ValueError(f"Catégorie inconnue: {v}")
        return v


class GalleryImageIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=160)
    description: Optional[str] = None
    image_url: str = Field(..., min_length=1, max_length=1024)
    category: str = "agriculture"

    @field_validator("description", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("category")
    @classmethod
    def known_category(cls, v: str) -> str:
        if v not in GALLERY_CATEGORIES:
            raise ValueError(f"Catégorie inconnue: {v}")
        return v


class ProjectIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=160)
    date: str = Field("En cours", max_length=64)
    category: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    icon: str = Field("Sprout", max_length=32)
    color: str = Field("primary", max_length=32)
    image_url: Optional[str] = Field(None, max_length=1024)
    sort_order: int = 0
    is_active: bool = True

    @field_validator("category", "description", "image_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)
