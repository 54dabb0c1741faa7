"""Pytest fixtures for AwwVision tests."""

from typing import Dict

import pytest

from tests.fakes import FakeLabelingService, InMemoryObjectStore


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def labeler() -> FakeLabelingService:
    return FakeLabelingService(label="dog")


@pytest.fixture
def reddit_listing_json() -> Dict:
    """Listing with two preview images, one post without a preview and extra fields."""
    return {
        "kind": "Listing",
        "data": {
            "after": "t3_xyz",
            "children": [
                {
                    "kind": "t3",
                    "data": {
                        "title": "A very good boy",
                        "url": "https://i.redd.it/one.jpg",
                        "preview": {
                            "enabled": True,
                            "images": [
                                {
                                    "id": "img1",
                                    "source": {"url": "http://url1", "width": 640, "height": 480},
                                    "resolutions": []
                                }
                            ]
                        }
                    }
                },
                {
                    "kind": "t3",
                    "data": {"title": "Text post", "url": "https://www.reddit.com/r/aww/comments/abc"}
                },
                {
                    "kind": "t3",
                    "data": {
                        "url": "https://i.redd.it/two.jpg",
                        "preview": {
                            "images": [
                                {
                                    "id": "img2",
                                    "source": {"url": "https://preview.redd.it/two.jpg?width=640&amp;s=abc"}
                                }
                            ]
                        }
                    }
                }
            ]
        }
    }


@pytest.fixture
def gallery_store() -> InMemoryObjectStore:
    """Store holding obj1 labeled dog and obj2 labeled cat."""
    store = InMemoryObjectStore()
    store.objects["obj1"] = {"content": b"", "metadata": {"label": "dog"}}
    store.objects["obj2"] = {"content": b"", "metadata": {"label": "cat"}}
    return store
