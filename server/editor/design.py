"""
In-memory room design shared by the plan and scene views.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from models.design import DesignResponse, DesignUpdate, RoomSettings
from editor.constraints import clamp_position, is_within_room
from editor.instances import FurnitureInstance

logger = logging.getLogger(__name__)


class UnknownInstanceError(KeyError):
    """Instance id is not part of the design."""
    pass


@dataclass
class DesignState:
    design_id: Optional[str] = None
    name: str = "New Room"
    room: RoomSettings = field(default_factory=RoomSettings)
    instances: List[FurnitureInstance] = field(default_factory=list)
    is_public: bool = True
    owner_id: Optional[str] = None

    @classmethod
    def from_response(cls, design: DesignResponse) -> "DesignState":
        state = cls(
            design_id=design.id,
            name=design.name,
            room=design.room,
            instances=[FurnitureInstance.from_placed(p) for p in design.furniture],
            is_public=design.isPublic,
            owner_id=design.createdBy,
        )
        for instance in state.instances:
            if not is_within_room(instance.position, state.room):
                logger.warning(f"Instance of {instance.model_id} in design {design.id} was outside the room, clamping")
                instance.position = clamp_position(instance.position, state.room)
        return state

    def to_update(self) -> DesignUpdate:
        return DesignUpdate(
            name=self.name,
            room=self.room,
            furniture=[i.to_placed() for i in self.instances],
            isPublic=self.is_public,
        )

    def index_of(self, instance_id: str) -> int:
        for index, instance in enumerate(self.instances):
            if instance.instance_id == instance_id:
                return index
        raise UnknownInstanceError(instance_id)

    def get(self, instance_id: str) -> FurnitureInstance:
        return self.instances[self.index_of(instance_id)]

    def append(self, instance: FurnitureInstance):
        self.instances.append(instance)

    def remove(self, instance_id: str) -> FurnitureInstance:
        return self.instances.pop(self.index_of(instance_id))
