import os
import tempfile

# Keep database files out of the source tree
os.environ.setdefault("ROOM_DESIGNER_DATA_DIR", tempfile.mkdtemp(prefix="room-designer-"))

import pytest

from db.connection import init_databases, close_databases
from editor.design import DesignState
from editor.instances import CatalogSnapshot
from editor.session import EditorSession
from editor.transform import ViewTransform
from models.design import RoomSettings
from models.furniture import FurnitureResponse


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def chair():
    return FurnitureResponse(
        id="chair", name="Chair", category="chair", modelUrl="/uploads/chair.glb",
        tags=["wood", "dining"], size={"width": 1.0, "depth": 1.0, "height": 1.0},
    )


@pytest.fixture
def sofa():
    return FurnitureResponse(
        id="sofa", name="Sofa", category="sofa", modelUrl="/uploads/sofa.glb",
        tags=["fabric"], size={"width": 2.0, "depth": 1.0, "height": 0.9},
    )


@pytest.fixture
def catalog(chair, sofa):
    return CatalogSnapshot([chair, sofa])


@pytest.fixture
def room():
    return RoomSettings(width=10, depth=10, height=3)


@pytest.fixture
def session(catalog, room):
    design = DesignState(design_id="design-1", room=room, owner_id="alice")
    return EditorSession(design, catalog, transform=ViewTransform(width=800, height=600, scale=50))


@pytest.fixture
def viewer_session(catalog, room):
    design = DesignState(design_id="design-1", room=room, owner_id="alice")
    return EditorSession(design, catalog, is_viewer=True,
                         transform=ViewTransform(width=800, height=600, scale=50))


@pytest.fixture
def db(tmp_path):
    init_databases(tmp_path / "designs.db", tmp_path / "furniture.db")
    yield
    close_databases()


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from main import app
    from routers import sessions

    sessions._sessions.clear()
    yield TestClient(app)
    sessions._sessions.clear()
