"""
AwwVision web service.

Serves the gallery page and mounts the pipeline API routes.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from pipelines.awwvision import __version__
from pipelines.awwvision.api.routes import close_components, router as awwvision_router

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="AwwVision",
    version=__version__,
    root_path=os.getenv("FASTAPI_ROOT_PATH", "")
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:8080").split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Paths
UI_DIR = Path(__file__).parent / "ui"


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "awwvision", "version": __version__}


# UI Routes
@app.get("/")
def root():
    """Serve the gallery page"""
    return FileResponse(UI_DIR / "index.html")


@app.get("/label/{label}")
def view_label(label: str):
    """Serve the gallery page; the page reads the label from its path"""
    return FileResponse(UI_DIR / "index.html")


# ============================================================================
# AWWVISION PIPELINE ROUTES
# ============================================================================
app.include_router(awwvision_router)
logger.info("AwwVision routes loaded")


@app.on_event("shutdown")
async def shutdown_event():
    """Close pipeline HTTP clients when the server stops."""
    await close_components()
