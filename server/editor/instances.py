"""
Placed furniture instances and their weak references into the catalog.
"""

import uuid
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from models.design import PlacedFurniture, Vector3
from models.furniture import FurnitureResponse, FurnitureSize

logger = logging.getLogger(__name__)

# Size used when an instance's catalog entry cannot be found
FALLBACK_SIZE = FurnitureSize(width=1.0, depth=1.0, height=1.0)


def normalize_scale(value: Union[float, int, Vector3, dict]) -> Vector3:
    """Scalar or per-axis scale -> per-axis triple."""
    if isinstance(value, dict):
        value = Vector3(**value)
    if isinstance(value, Vector3):
        scale = value
    else:
        scale = Vector3(x=float(value), y=float(value), z=float(value))
    if min(scale.x, scale.y, scale.z) <= 0:
        raise ValueError(f"Scale must be positive, got {scale}")
    return scale


def denormalize_scale(scale: Vector3) -> Union[float, Vector3]:
    if scale.x == scale.y == scale.z:
        return scale.x
    return scale


@dataclass
class FurnitureInstance:
    model_id: str
    position: Vector3 = Vector3()
    rotation: Vector3 = Vector3()
    scale: Vector3 = Vector3(x=1.0, y=1.0, z=1.0)
    instance_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def yaw(self) -> float:
        return self.rotation.y

    @classmethod
    def from_placed(cls, placed: PlacedFurniture) -> "FurnitureInstance":
        return cls(
            model_id=placed.modelId,
            position=placed.position,
            rotation=placed.rotation,
            scale=normalize_scale(placed.scale),
        )

    def to_placed(self) -> PlacedFurniture:
        return PlacedFurniture(
            modelId=self.model_id,
            position=self.position,
            rotation=self.rotation,
            scale=denormalize_scale(self.scale),
        )


class CatalogSnapshot:
    """Catalog entries as they were when the editing session started."""

    def __init__(self, entries: Iterable[FurnitureResponse] = ()):
        self._entries: Dict[str, FurnitureResponse] = {e.id: e for e in entries}

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, model_id: str) -> Optional[FurnitureResponse]:
        return self._entries.get(model_id)

    @property
    def entries(self) -> List[FurnitureResponse]:
        return list(self._entries.values())

    def categories(self) -> List[str]:
        return sorted({e.category for e in self._entries.values()})

    def tags(self) -> List[str]:
        return sorted({tag for e in self._entries.values() for tag in e.tags})

    def search(self, category: Optional[str] = None, tag: Optional[str] = None,
               text: Optional[str] = None) -> List[FurnitureResponse]:
        results = []
        needle = text.lower() if text else None
        for entry in self._entries.values():
            if category and entry.category != category:
                continue
            if tag and tag not in entry.tags:
                continue
            if needle and needle not in entry.name.lower() and needle not in entry.description.lower():
                continue
            results.append(entry)
        return results

    def resolve(self, instance: FurnitureInstance) -> Optional[FurnitureResponse]:
        """Catalog entry for an instance, or None when it is gone from the snapshot."""
        entry = self._entries.get(instance.model_id)
        if entry is None:
            logger.warning(f"Catalog entry {instance.model_id} not found for instance {instance.instance_id}")
        return entry


def footprint(entry: Optional[FurnitureResponse]) -> Tuple[float, float, float]:
    size = entry.size if entry is not None else FALLBACK_SIZE
    return size.width, size.depth, size.height
