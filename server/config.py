import os
from pathlib import Path

# Base paths
SERVER_DIR = Path(__file__).parent
DATA_DIR = Path(os.environ.get("ROOM_DESIGNER_DATA_DIR", SERVER_DIR / "data"))

# Database paths
DESIGNS_DB = DATA_DIR / "designs.db"
FURNITURE_DB = DATA_DIR / "furniture.db"

# Optional frontend bundle served at /
STATIC_DIR = Path(os.environ.get("ROOM_DESIGNER_STATIC_DIR", SERVER_DIR.parent / "client" / "dist"))

# Remote API (used by api_client)
API_URL = os.environ.get("ROOM_DESIGNER_API_URL", "http://localhost:8000")
API_TIMEOUT = float(os.environ.get("ROOM_DESIGNER_API_TIMEOUT", "30"))

# Editor sessions untouched this long (seconds) are closed
SESSION_IDLE_TIMEOUT = float(os.environ.get("ROOM_DESIGNER_SESSION_IDLE_TIMEOUT", "3600"))

# Create directories
DATA_DIR.mkdir(parents=True, exist_ok=True)
