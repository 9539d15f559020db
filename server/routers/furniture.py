from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
import uuid
import json
import logging

from db.connection import get_furniture_db
from identity import Identity, require_admin
from models.furniture import FurnitureCreate, FurnitureUpdate, FurnitureResponse

logger = logging.getLogger(__name__)

router = APIRouter()

FURNITURE_SELECT = """
    SELECT id, name, description, category, price, model_url, thumbnail_url, tags,
           width, depth, height, is_available, created_by, created_at, updated_at
    FROM furniture
"""

# Simple column updates: request field -> column
UPDATE_COLUMNS = {
    "name": "name",
    "description": "description",
    "category": "category",
    "price": "price",
    "modelUrl": "model_url",
    "thumbnailUrl": "thumbnail_url",
    "isAvailable": "is_available",
}


def row_to_response(row) -> FurnitureResponse:
    tags = json.loads(row[7]) if row[7] else []
    return FurnitureResponse(
        id=row[0],
        name=row[1],
        description=row[2] or "",
        category=row[3] or "other",
        price=row[4] or 0.0,
        modelUrl=row[5],
        thumbnailUrl=row[6],
        tags=tags,
        size={"width": row[8] or 1.0, "depth": row[9] or 1.0, "height": row[10] or 1.0},
        isAvailable=row[11] if row[11] is not None else True,
        createdBy=row[12],
        createdAt=str(row[13]) if row[13] else None,
        updatedAt=str(row[14]) if row[14] else None,
    )


def list_catalog_entries() -> List[FurnitureResponse]:
    """Catalog snapshot for editor sessions."""
    db = get_furniture_db()
    rows = db.execute(f"{FURNITURE_SELECT} ORDER BY created_at DESC").fetchall()
    return [row_to_response(row) for row in rows]


@router.get("/", response_model=List[FurnitureResponse])
def get_all_furniture(category: Optional[str] = None, tag: Optional[str] = None):
    entries = list_catalog_entries()
    if category:
        entries = [e for e in entries if e.category == category]
    if tag:
        entries = [e for e in entries if tag in e.tags]
    return entries


@router.get("/categories")
def get_categories():
    db = get_furniture_db()
    rows = db.execute("SELECT DISTINCT category FROM furniture WHERE category IS NOT NULL").fetchall()
    return sorted([row[0] for row in rows])


@router.get("/tags")
def get_tags():
    db = get_furniture_db()
    rows = db.execute("SELECT tags FROM furniture WHERE tags IS NOT NULL").fetchall()
    all_tags = set()
    for row in rows:
        tags = json.loads(row[0]) if row[0] else []
        all_tags.update(tags)
    return sorted(list(all_tags))


@router.get("/{furniture_id}", response_model=FurnitureResponse)
def get_furniture(furniture_id: str):
    db = get_furniture_db()
    row = db.execute(f"{FURNITURE_SELECT} WHERE id = ?", [furniture_id]).fetchone()
    if not row:
        raise HTTPException(404, "Furniture not found")
    return row_to_response(row)


@router.post("/", response_model=FurnitureResponse, status_code=201)
def create_furniture(furniture: FurnitureCreate, identity: Identity = Depends(require_admin)):
    db = get_furniture_db()
    furn_id = furniture.id or str(uuid.uuid4())
    if db.execute("SELECT id FROM furniture WHERE id = ?", [furn_id]).fetchone():
        raise HTTPException(409, "Furniture id already exists")

    db.execute("""
        INSERT INTO furniture (id, name, description, category, price, model_url, thumbnail_url,
                               tags, width, depth, height, is_available, created_by)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, [furn_id, furniture.name, furniture.description, furniture.category, furniture.price,
          furniture.modelUrl, furniture.thumbnailUrl, json.dumps(furniture.tags),
          furniture.size.width, furniture.size.depth, furniture.size.height,
          furniture.isAvailable, identity.user_id])

    logger.info(f"Catalog entry {furn_id} ({furniture.name}) created by {identity.user_id}")
    return get_furniture(furn_id)


@router.put("/{furniture_id}", response_model=FurnitureResponse)
def update_furniture(furniture_id: str, furniture: FurnitureUpdate,
                     identity: Identity = Depends(require_admin)):
    db = get_furniture_db()
    existing = db.execute("SELECT id FROM furniture WHERE id = ?", [furniture_id]).fetchone()
    if not existing:
        raise HTTPException(404, "Furniture not found")

    updates = []
    values = []

    for field, column in UPDATE_COLUMNS.items():
        value = getattr(furniture, field)
        if value is not None:
            updates.append(f"{column} = ?")
            values.append(value)
    if furniture.tags is not None:
        updates.append("tags = ?")
        values.append(json.dumps(furniture.tags))
    if furniture.size is not None:
        updates.extend(["width = ?", "depth = ?", "height = ?"])
        values.extend([furniture.size.width, furniture.size.depth, furniture.size.height])

    if updates:
        updates.append("updated_at = CURRENT_TIMESTAMP")
        values.append(furniture_id)
        db.execute(f"UPDATE furniture SET {', '.join(updates)} WHERE id = ?", values)

    return get_furniture(furniture_id)


@router.delete("/{furniture_id}")
def delete_furniture(furniture_id: str, identity: Identity = Depends(require_admin)):
    db = get_furniture_db()
    existing = db.execute("SELECT id FROM furniture WHERE id = ?", [furniture_id]).fetchone()
    if not existing:
        raise HTTPException(404, "Furniture not found")

    # Designs keep their references; editors render them as placeholders
    db.execute("DELETE FROM furniture WHERE id = ?", [furniture_id])
    logger.info(f"Catalog entry {furniture_id} deleted by {identity.user_id}")
    return {"status": "deleted"}
