from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal

FurnitureCategory = Literal[
    "chair", "table", "sofa", "bed", "storage", "lighting", "decoration", "other"
]


class FurnitureSize(BaseModel):
    width: float = Field(1.0, gt=0)
    depth: float = Field(1.0, gt=0)
    height: float = Field(1.0, gt=0)


def _clean_tags(tags):
    if tags is None:
        return None
    if isinstance(tags, str):
        tags = tags.split(",")
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class FurnitureCreate(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: str = ""
    category: FurnitureCategory = "other"
    price: float = Field(0.0, ge=0)
    modelUrl: str
    thumbnailUrl: Optional[str] = None
    tags: List[str] = []
    size: FurnitureSize = FurnitureSize()
    isAvailable: bool = True

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        return _clean_tags(value) or []


class FurnitureUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[FurnitureCategory] = None
    price: Optional[float] = Field(None, ge=0)
    modelUrl: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    tags: Optional[List[str]] = None
    size: Optional[FurnitureSize] = None
    isAvailable: Optional[bool] = None

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, value):
        return _clean_tags(value)


class FurnitureResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    category: FurnitureCategory = "other"
    price: float = 0.0
    modelUrl: str
    thumbnailUrl: Optional[str] = None
    tags: List[str] = []
    size: FurnitureSize = FurnitureSize()
    isAvailable: bool = True
    createdBy: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
