"""
FastAPI routes for the AwwVision pipeline.

Provides the scrape trigger, gallery listings and a configuration health check.
"""

import logging
from typing import Dict, Any, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from app.models.schemas import GalleryImageResponse, GalleryResponse, ScrapeStatusResponse

from ..config.settings import PipelineConfig, get_pipeline_config
from ..core.exceptions import ConfigurationError, FetchError, ListError
from ..core.gallery import filter_by_label, group_by_label, list_gallery_images
from ..core.interfaces import ObjectStore
from ..core.models import GalleryImage
from ..core.scrape_orchestrator import RedditScrapeOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["AwwVision"])


_config: Optional[PipelineConfig] = None
_storage_client: Optional[ObjectStore] = None
_orchestrator: Optional[RedditScrapeOrchestrator] = None


# =============================================================================
# Lazy component initialization
# =============================================================================

def get_config() -> PipelineConfig:
    """Pipeline configuration, resolved once per process."""
    global _config
    if _config is None:
        _config = get_pipeline_config()
    return _config


def get_storage_client() -> ObjectStore:
    """Lazy initialization of the Cloud Storage client."""
    global _storage_client
    if _storage_client is None:
        from ..core.storage_client import CloudStorageClient

        config = get_config()
        try:
            bucket_name = config.require_bucket_name()
        except ConfigurationError as e:
            raise HTTPException(status_code=500, detail=str(e))

        _storage_client = CloudStorageClient(
            bucket_name=bucket_name,
            service_account_json=config.storage.service_account_json,
            application_name=config.application_name
        )
    return _storage_client


def get_orchestrator() -> RedditScrapeOrchestrator:
    """Lazy initialization of the scrape orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        from ..core.reddit_client import RedditFeedClient
        from ..core.vision_service import CloudVisionService

        config = get_config()
        _orchestrator = RedditScrapeOrchestrator(
            feed_client=RedditFeedClient(
                user_agent=config.reddit.user_agent,
                feed_url=config.reddit.feed_url,
                timeout=config.http_timeout
            ),
            object_store=get_storage_client(),
            labeling_service=CloudVisionService(
                service_account_json=config.vision.service_account_json,
                max_results=config.vision.max_results,
                application_name=config.application_name
            ),
            download_timeout=config.http_timeout
        )
    return _orchestrator


async def close_components():
    """Close the orchestrator's HTTP clients and drop the cached components."""
    global _config, _storage_client, _orchestrator
    if _orchestrator is not None:
        await _orchestrator.close()
        logger.info("AwwVision orchestrator closed")
    _config = None
    _storage_client = None
    _orchestrator = None


# =============================================================================
# Background Task Runner
# =============================================================================

async def _run_scrape_task(orchestrator: RedditScrapeOrchestrator):
    """Background task to run one scrape."""
    try:
        results = await orchestrator.scrape()
        logger.info(f"Background scrape complete: {results}")
    except Exception as e:
        logger.error(f"Background scrape failed: {e}", exc_info=True)


def _gallery_response(images: List[GalleryImage], label: Optional[str] = None) -> GalleryResponse:
    return GalleryResponse(
        images=[GalleryImageResponse(url=image.url, label=image.label) for image in images],
        label=label,
        labels=list(group_by_label(images).keys()),
        count=len(images)
    )


def _list_images(store: ObjectStore) -> List[GalleryImage]:
    try:
        return list_gallery_images(store)
    except ListError as e:
        logger.error(f"Failed to list stored images: {e}")
        raise HTTPException(status_code=502, detail=str(e))


# =============================================================================
# API Endpoints
# =============================================================================

@router.api_route("/reddit", methods=["GET", "POST"], response_model=ScrapeStatusResponse)
async def trigger_scrape(
    background_tasks: BackgroundTasks,
    wait: bool = Query(False, description="Run the scrape inline and return its statistics"),
    orchestrator: RedditScrapeOrchestrator = Depends(get_orchestrator)
):
    """
    Scrape Reddit, label new images and store them.

    Runs in the background unless **wait** is set.
    """
    if not wait:
        background_tasks.add_task(_run_scrape_task, orchestrator)
        return ScrapeStatusResponse(
            status="started",
            message="Reddit scrape started. Running in background."
        )

    try:
        stats = await orchestrator.scrape()
    except FetchError as e:
        logger.error(f"Scrape aborted: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return ScrapeStatusResponse(
        status=stats["status"],
        message=f"Stored {stats['stored']} of {stats['discovered']} images",
        stats=stats
    )


@router.get("/api/images", response_model=GalleryResponse)
def list_images(store: ObjectStore = Depends(get_storage_client)):
    """All stored images with their labels."""
    return _gallery_response(_list_images(store))


@router.get("/api/images/label/{label}", response_model=GalleryResponse)
def list_images_by_label(label: str, store: ObjectStore = Depends(get_storage_client)):
    """Stored images carrying the given label. Unknown labels yield an empty list."""
    images = filter_by_label(_list_images(store), label)
    return _gallery_response(images, label=label)


@router.get("/api/images/health")
def pipeline_health(config: PipelineConfig = Depends(get_config)) -> Dict[str, Any]:
    """
    Health check for the AwwVision pipeline.

    Reports configuration only; no Google API is called.
    """
    result: Dict[str, Any] = {
        "status": "healthy",
        "bucket_configured": bool(config.storage.bucket_name),
        "bucket_name": config.storage.bucket_name,
        "explicit_credentials": bool(config.storage.service_account_json),
        "feed_url": config.reddit.feed_url,
        "application_name": config.application_name
    }

    if not result["bucket_configured"]:
        result["status"] = "degraded"
        result["warnings"] = ["No storage bucket configured (VCAP_SERVICES or AWWVISION_BUCKET_NAME)"]

    return result
