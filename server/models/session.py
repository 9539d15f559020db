from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union

from models.design import RoomSettings, Vector3

ViewModeName = Literal["2d", "3d"]


class SessionCreate(BaseModel):
    designId: str
    viewMode: ViewModeName = "2d"
    isViewer: bool = False
    viewportWidth: float = Field(800.0, gt=0)
    viewportHeight: float = Field(600.0, gt=0)


class InputEvent(BaseModel):
    type: Literal["pointerDown", "pointerMove", "pointerUp", "pointerLeave", "click", "wheel", "key"]
    # Plan view: canvas pixels
    x: Optional[float] = None
    y: Optional[float] = None
    # Scene view: raycast hit and floor-plane intersection
    targetId: Optional[str] = None
    groundX: Optional[float] = None
    groundZ: Optional[float] = None
    deltaY: float = 0.0
    key: Optional[str] = None
    shiftKey: bool = False


class AddFurnitureRequest(BaseModel):
    modelId: str
    position: Optional[Vector3] = None
    rotation: Optional[Vector3] = None
    scale: Union[float, Vector3] = 1.0


class SelectRequest(BaseModel):
    instanceId: Optional[str] = None


class ViewModeRequest(BaseModel):
    viewMode: ViewModeName


class ViewportRequest(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class PanRequest(BaseModel):
    x: float
    y: float


class DetailsRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    isPublic: Optional[bool] = None


class InstanceState(BaseModel):
    instanceId: str
    index: int
    modelId: str
    name: Optional[str] = None
    resolved: bool
    position: Vector3
    rotation: Vector3
    scale: Vector3


class ViewState(BaseModel):
    scale: float
    panX: float
    panY: float
    width: float
    height: float
    zoomPercent: int


class SessionState(BaseModel):
    id: str
    designId: Optional[str] = None
    name: str
    isPublic: bool
    isViewer: bool
    viewMode: ViewModeName
    room: RoomSettings
    furniture: List[InstanceState]
    selectedId: Optional[str] = None
    selectedIndex: Optional[int] = None
    gesture: str
    view: ViewState
    revision: int
    dirty: bool
    saveStatus: str
    saveError: Optional[str] = None


class EventResult(BaseModel):
    handled: bool
    state: SessionState
