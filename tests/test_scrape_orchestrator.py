"""Tests for the scrape-label-store orchestrator."""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from pipelines.awwvision.core.exceptions import FetchError
from pipelines.awwvision.core.models import FeedEntry, RedditResponse
from pipelines.awwvision.core.scrape_orchestrator import RedditScrapeOrchestrator

from tests.fakes import (
    FakeLabelingService,
    InMemoryObjectStore,
    StaticFeedClient,
    image_bytes_for,
    make_download_client,
    make_entry,
)


def make_orchestrator(entries, store, labeler, failing_urls=()) -> RedditScrapeOrchestrator:
    return RedditScrapeOrchestrator(
        feed_client=StaticFeedClient(entries),
        object_store=store,
        labeling_service=labeler,
        http_client=make_download_client(failing_urls),
    )


@pytest.mark.asyncio
async def test_scrape_uploads_each_labeled_image(store, labeler):
    entries = [make_entry("img1", "http://url1"), make_entry("img2", "http://url2")]
    orchestrator = make_orchestrator(entries, store, labeler)

    stats = await orchestrator.scrape()

    assert store.uploads == [
        {
            "name": "img1.jpg",
            "content": image_bytes_for("http://url1"),
            "content_type": "image/jpeg",
            "metadata": {"label": "dog"},
        },
        {
            "name": "img2.jpg",
            "content": image_bytes_for("http://url2"),
            "content_type": "image/jpeg",
            "metadata": {"label": "dog"},
        },
    ]
    assert stats["discovered"] == 2
    assert stats["stored"] == 2
    assert stats["status"] == "success"


@pytest.mark.asyncio
async def test_run_listing_processes_every_preview_image(store, labeler):
    listing = RedditResponse.model_validate({"data": {"children": [{"data": {"preview": {"images": [
        {"id": "img1", "source": {"url": "http://url1"}},
        {"id": "img2", "source": {"url": "http://url2"}},
    ]}}}]}})
    orchestrator = make_orchestrator([], store, labeler)

    await orchestrator.run_listing(listing)

    assert [u["name"] for u in store.uploads] == ["img1.jpg", "img2.jpg"]


@pytest.mark.asyncio
async def test_rerun_is_idempotent(store):
    labeler = FakeLabelingService(label="dog")
    entries = [make_entry("img1", "http://url1"), make_entry("img2", "http://url2")]
    orchestrator = make_orchestrator(entries, store, labeler)

    await orchestrator.scrape()
    snapshot = dict(store.objects)
    second = await orchestrator.scrape()

    assert store.objects == snapshot
    assert len(store.uploads) == 2
    assert len(labeler.calls) == 2
    assert second["already_stored"] == 2
    assert second["stored"] == 0


@pytest.mark.asyncio
async def test_entry_without_preview_is_never_touched(store, labeler):
    no_preview = FeedEntry(source_image_url="http://url1", display_name="img1.jpg", preview_available=False)
    download_client = make_download_client()
    download_client.get = AsyncMock(wraps=download_client.get)
    orchestrator = RedditScrapeOrchestrator(
        feed_client=StaticFeedClient([no_preview]),
        object_store=store,
        labeling_service=labeler,
        http_client=download_client,
    )

    stats = await orchestrator.scrape()

    download_client.get.assert_not_called()
    assert store.exists_calls == []
    assert labeler.calls == []
    assert store.uploads == []
    assert stats["skipped_no_preview"] == 1


@pytest.mark.asyncio
async def test_malformed_entry_is_skipped(store, labeler):
    malformed = FeedEntry(source_image_url="", display_name="img1.jpg")
    orchestrator = make_orchestrator([malformed], store, labeler)

    stats = await orchestrator.scrape()

    assert store.exists_calls == []
    assert stats["skipped_no_preview"] == 1


@pytest.mark.asyncio
async def test_existing_object_is_not_labeled(labeler):
    store = InMemoryObjectStore()
    store.objects["img1.jpg"] = {"content": b"old", "metadata": {"label": "cat"}}
    orchestrator = make_orchestrator([make_entry("img1", "http://url1")], store, labeler)

    stats = await orchestrator.scrape()

    assert labeler.calls == []
    assert store.uploads == []
    assert store.objects["img1.jpg"]["metadata"] == {"label": "cat"}
    assert stats["already_stored"] == 1


@pytest.mark.asyncio
async def test_no_label_means_no_upload(store):
    labeler = FakeLabelingService(label=None)
    orchestrator = make_orchestrator([make_entry("img1", "http://url1")], store, labeler)

    stats = await orchestrator.scrape()

    assert len(labeler.calls) == 1
    assert store.uploads == []
    assert stats["no_label"] == 1
    assert stats["status"] == "success"


@pytest.mark.asyncio
async def test_label_error_means_no_upload_and_run_continues(store):
    labeler = FakeLabelingService(error="Bad image data.")
    entries = [make_entry("img1", "http://url1"), make_entry("img2", "http://url2")]
    orchestrator = make_orchestrator(entries, store, labeler)

    stats = await orchestrator.scrape()

    assert len(labeler.calls) == 2
    assert store.uploads == []
    assert stats["label_failed"] == 2
    assert stats["status"] == "partial"
    assert any("http://url1" in error for error in stats["errors"])


@pytest.mark.asyncio
async def test_download_failure_skips_only_that_entry(store, labeler):
    entries = [make_entry("img1", "http://url1"), make_entry("img2", "http://url2")]
    orchestrator = make_orchestrator(entries, store, labeler, failing_urls=("http://url1",))

    stats = await orchestrator.scrape()

    assert store.exists_calls == ["img2.jpg"]
    assert [u["name"] for u in store.uploads] == ["img2.jpg"]
    assert stats["download_failed"] == 1
    assert stats["stored"] == 1


@pytest.mark.asyncio
async def test_upload_failure_is_isolated(labeler):
    store = InMemoryObjectStore(fail_uploads=True)
    entries = [make_entry("img1", "http://url1"), make_entry("img2", "http://url2")]
    orchestrator = make_orchestrator(entries, store, labeler)

    stats = await orchestrator.scrape()

    assert len(store.uploads) == 2
    assert store.objects == {}
    assert stats["upload_failed"] == 2


@pytest.mark.asyncio
async def test_fetch_error_aborts_run(store, labeler):
    feed = StaticFeedClient([])
    feed.fetch = AsyncMock(side_effect=FetchError("reddit is down"))
    orchestrator = RedditScrapeOrchestrator(feed, store, labeler, http_client=make_download_client())

    with pytest.raises(FetchError):
        await orchestrator.scrape()

    assert store.exists_calls == []


@pytest.mark.asyncio
async def test_close_closes_feed_and_download_client(store, labeler):
    feed = StaticFeedClient([])
    download_client = make_download_client()
    orchestrator = RedditScrapeOrchestrator(feed, store, labeler, http_client=download_client)

    await orchestrator.close()

    assert feed.closed is True
    assert download_client.is_closed


class SlowLabelingService(FakeLabelingService):
    """Labeler whose call blocks the calling thread, like a real API round trip."""

    def __init__(self, delay: float):
        super().__init__(label="dog")
        self.delay = delay

    def label_image(self, image_bytes: bytes):
        time.sleep(self.delay)
        return super().label_image(image_bytes)


@pytest.mark.asyncio
async def test_blocking_api_calls_do_not_stall_event_loop(store):
    entries = [make_entry("img1", "http://url1"), make_entry("img2", "http://url2")]
    orchestrator = make_orchestrator(entries, store, SlowLabelingService(delay=0.2))
    ticks = 0

    async def ticker():
        nonlocal ticks
        while True:
            await asyncio.sleep(0.01)
            ticks += 1

    ticker_task = asyncio.create_task(ticker())
    try:
        stats = await orchestrator.scrape()
    finally:
        ticker_task.cancel()

    assert stats["stored"] == 2
    # 0.4s of blocking labeling; a starved loop would not tick at all
    assert ticks >= 10
