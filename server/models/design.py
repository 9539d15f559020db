import math
import logging
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Union

logger = logging.getLogger(__name__)

# Smallest room dimension accepted from storage or updates
MIN_ROOM_DIMENSION = 1.0


class Vector3(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


def _safe_dimension(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = float("nan")
    if not math.isfinite(number) or number <= 0:
        logger.warning(f"Invalid room {field_name} {value!r}, using {MIN_ROOM_DIMENSION}")
        return MIN_ROOM_DIMENSION
    return number


class RoomSettings(BaseModel):
    width: float = 10.0
    depth: float = 10.0
    height: float = 3.0
    wallColor: str = "#ffffff"
    floorColor: str = "#8b7355"
    ceilingColor: str = "#ffffff"

    @field_validator("width", "depth", "height", mode="before")
    @classmethod
    def clamp_dimension(cls, value, info):
        return _safe_dimension(value, info.field_name)


class RoomSettingsUpdate(BaseModel):
    width: Optional[float] = None
    depth: Optional[float] = None
    height: Optional[float] = None
    wallColor: Optional[str] = None
    floorColor: Optional[str] = None
    ceilingColor: Optional[str] = None

    @field_validator("width", "depth", "height", mode="before")
    @classmethod
    def clamp_dimension(cls, value, info):
        if value is None:
            return None
        return _safe_dimension(value, info.field_name)


class PlacedFurniture(BaseModel):
    """Persisted shape of one furniture instance."""
    modelId: str
    position: Vector3 = Vector3()
    rotation: Vector3 = Vector3()
    scale: Union[float, Vector3] = 1.0

    @field_validator("modelId", mode="before")
    @classmethod
    def unwrap_model_ref(cls, value):
        # Populated references carry the whole catalog entry
        if isinstance(value, dict):
            value = value.get("id") or value.get("_id")
        elif isinstance(value, BaseModel):
            value = getattr(value, "id", None)
        if not value:
            raise ValueError("modelId must be a catalog id or an entry carrying one")
        return str(value)

    @field_validator("scale")
    @classmethod
    def positive_scale(cls, value):
        components = (value,) if isinstance(value, (int, float)) else (value.x, value.y, value.z)
        if any(c <= 0 for c in components):
            raise ValueError("scale must be positive")
        return value


class DesignCreate(BaseModel):
    name: str = Field("New Room", min_length=1)
    room: RoomSettings = RoomSettings()
    furniture: List[PlacedFurniture] = []
    isPublic: bool = True


class DesignUpdate(BaseModel):
    name: Optional[str] = None
    room: Optional[RoomSettings] = None
    furniture: Optional[List[PlacedFurniture]] = None
    isPublic: Optional[bool] = None


class DesignResponse(BaseModel):
    id: str
    name: str
    room: RoomSettings
    furniture: List[PlacedFurniture] = []
    isPublic: bool = True
    createdBy: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
