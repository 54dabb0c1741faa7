"""
Cloud Function entry point for the AwwVision pipeline.

Triggered by Cloud Scheduler or an HTTP request to run one Reddit scrape.
"""

import json
import asyncio
import logging
from datetime import datetime, timezone

import functions_framework

from pipelines.awwvision.core.exceptions import ConfigurationError, FetchError
from pipelines.awwvision.core.scrape_orchestrator import create_orchestrator_from_env

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


async def _scrape_once() -> dict:
    orchestrator = create_orchestrator_from_env()
    try:
        return await orchestrator.scrape()
    finally:
        await orchestrator.close()


@functions_framework.http
def scrape_reddit(request):
    """
    Cloud Function entry point for a scrape run.

    The request body is ignored; every run processes the current hot listing.
    """
    start_time = datetime.now(timezone.utc)
    logger.info(f"Reddit scrape triggered at {start_time.isoformat()}")

    def elapsed() -> float:
        return (datetime.now(timezone.utc) - start_time).total_seconds()

    try:
        results = asyncio.run(_scrape_once())
        results["duration_seconds"] = elapsed()

        logger.info(f"Scrape complete: {results['stored']} images stored in {results['duration_seconds']:.1f}s")
        return json.dumps(results), 200, JSON_HEADERS

    except ConfigurationError as e:
        logger.error(f"Scrape not configured: {e}")
        return json.dumps({
            "status": "error",
            "message": str(e),
            "duration_seconds": elapsed()
        }), 500, JSON_HEADERS

    except FetchError as e:
        logger.error(f"Scrape aborted: {e}")
        return json.dumps({
            "status": "error",
            "message": str(e),
            "duration_seconds": elapsed()
        }), 502, JSON_HEADERS

    except Exception as e:
        logger.error(f"Scrape failed: {e}", exc_info=True)
        return json.dumps({
            "status": "error",
            "message": str(e),
            "duration_seconds": elapsed()
        }), 500, JSON_HEADERS


@functions_framework.http
def health_check(request):
    """Health check endpoint for the Cloud Function."""
    return json.dumps({
        "status": "healthy",
        "service": "awwvision-scraper",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }), 200, JSON_HEADERS
