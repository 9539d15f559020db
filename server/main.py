from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import StreamingResponse
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import sys

# Add current directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from config import STATIC_DIR
from db.connection import init_databases, close_databases
from routers import furniture, designs, sessions
from events import subscribe

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_databases()
    yield
    close_databases()

app = FastAPI(title="Room Designer API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(furniture.router, prefix="/api/furniture", tags=["furniture"])
app.include_router(designs.router, prefix="/api/designs", tags=["designs"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])


@app.get("/api/events")
async def sse_events(designId: Optional[str] = None):
    """Server-Sent Events endpoint; pass designId to follow a single design."""
    return StreamingResponse(
        subscribe(designId),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        }
    )


# Serve frontend static files when a build is present
if STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(STATIC_DIR), html=True), name="static")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
