from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
import uuid
import json
import logging

from db.connection import get_designs_db
from events import publish
from identity import Identity, get_identity, require_user
from models.design import DesignCreate, DesignUpdate, DesignResponse

logger = logging.getLogger(__name__)

router = APIRouter()

DESIGN_SELECT = """
    SELECT id, name, room, furniture, is_public, created_by, created_at, updated_at
    FROM designs
"""


def row_to_response(row) -> DesignResponse:
    furniture = json.loads(row[3]) if row[3] else []
    return DesignResponse(
        id=row[0],
        name=row[1],
        room=json.loads(row[2]) if row[2] else {},
        furniture=furniture,
        isPublic=bool(row[4]),
        createdBy=row[5],
        createdAt=str(row[6]) if row[6] else None,
        updatedAt=str(row[7]) if row[7] else None,
    )


def fetch_design(design_id: str) -> Optional[DesignResponse]:
    db = get_designs_db()
    row = db.execute(f"{DESIGN_SELECT} WHERE id = ?", [design_id]).fetchone()
    return row_to_response(row) if row else None


def load_design(design_id: str) -> DesignResponse:
    design = fetch_design(design_id)
    if design is None:
        raise HTTPException(404, "Room design not found")
    return design


def write_design(design_id: str, update: DesignUpdate):
    """Persist the fields present in update."""
    db = get_designs_db()
    updates = []
    values = []

    if update.name is not None:
        updates.append("name = ?")
        values.append(update.name)
    if update.room is not None:
        updates.append("room = ?")
        values.append(json.dumps(update.room.model_dump(mode="json")))
    if update.furniture is not None:
        updates.append("furniture = ?")
        values.append(json.dumps([f.model_dump(mode="json") for f in update.furniture]))
    if update.isPublic is not None:
        updates.append("is_public = ?")
        values.append(update.isPublic)

    if updates:
        updates.append("updated_at = CURRENT_TIMESTAMP")
        values.append(design_id)
        db.execute(f"UPDATE designs SET {', '.join(updates)} WHERE id = ?", values)
        publish("design_updated", {"id": design_id})


@router.get("/", response_model=List[DesignResponse])
def get_designs(identity: Identity = Depends(require_user)):
    db = get_designs_db()
    if identity.is_admin:
        rows = db.execute(f"{DESIGN_SELECT} ORDER BY created_at DESC").fetchall()
    else:
        rows = db.execute(
            f"{DESIGN_SELECT} WHERE created_by = ? ORDER BY created_at DESC",
            [identity.user_id]
        ).fetchall()
    return [row_to_response(row) for row in rows]


@router.get("/public/{design_id}", response_model=DesignResponse)
def get_public_design(design_id: str):
    design = fetch_design(design_id)
    if design is None or not design.isPublic:
        raise HTTPException(404, "Public room design not found")
    return design


@router.get("/{design_id}", response_model=DesignResponse)
def get_design(design_id: str, identity: Identity = Depends(get_identity)):
    design = load_design(design_id)
    if not identity.can_view(design.createdBy, design.isPublic):
        raise HTTPException(403, "Access denied")
    return design


@router.post("/", response_model=DesignResponse, status_code=201)
def create_design(design: DesignCreate, identity: Identity = Depends(require_user)):
    db = get_designs_db()
    design_id = str(uuid.uuid4())
    db.execute(
        """
        INSERT INTO designs (id, name, room, furniture, is_public, created_by)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        [design_id, design.name, json.dumps(design.room.model_dump(mode="json")),
         json.dumps([f.model_dump(mode="json") for f in design.furniture]),
         design.isPublic, identity.user_id]
    )
    logger.info(f"Design {design_id} created by {identity.user_id}")
    return load_design(design_id)


@router.put("/{design_id}", response_model=DesignResponse)
def update_design(design_id: str, update: DesignUpdate, identity: Identity = Depends(require_user)):
    design = load_design(design_id)
    if not identity.can_edit(design.createdBy):
        raise HTTPException(403, "Access denied")
    write_design(design_id, update)
    return load_design(design_id)


@router.delete("/{design_id}")
def delete_design(design_id: str, identity: Identity = Depends(require_user)):
    design = load_design(design_id)
    if not identity.can_edit(design.createdBy):
        raise HTTPException(403, "Access denied")
    db = get_designs_db()
    db.execute("DELETE FROM designs WHERE id = ?", [design_id])
    logger.info(f"Design {design_id} deleted by {identity.user_id}")
    return {"status": "deleted"}
