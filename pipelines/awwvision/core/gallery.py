"""Gallery views over the stored images."""

from collections import OrderedDict
from typing import Dict, List

from .interfaces import ObjectStore
from .models import GalleryImage


def list_gallery_images(store: ObjectStore) -> List[GalleryImage]:
    """All stored images in bucket order."""
    return [
        GalleryImage(url=obj.public_url, label=obj.label)
        for obj in store.list_all()
    ]


def filter_by_label(images: List[GalleryImage], label: str) -> List[GalleryImage]:
    """Images whose label matches exactly."""
    return [image for image in images if image.label == label]


def group_by_label(images: List[GalleryImage]) -> Dict[str, List[GalleryImage]]:
    """
    Group images by label, keeping first-seen label order.

    Images stored without a label are not grouped.
    """
    groups: Dict[str, List[GalleryImage]] = OrderedDict()
    for image in images:
        if image.label is None:
            continue
        groups.setdefault(image.label, []).append(image)
    return groups
