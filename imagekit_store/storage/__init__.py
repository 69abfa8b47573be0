"""
Storage backend abstraction for image uploads.

Provides the host-facing adapter interface and the ImageKit backend.
"""

from imagekit_store.storage.adapter import AdapterError, Image, ReadOptions, StorageAdapter
from imagekit_store.storage.client import ImageKitClient, ImageKitError, UploadResult
from imagekit_store.storage.imagekit import ImageKitStore
from imagekit_store.storage.factory import create_store

__all__ = [
    "AdapterError",
    "Image",
    "ReadOptions",
    "StorageAdapter",
    "ImageKitClient",
    "ImageKitError",
    "UploadResult",
    "ImageKitStore",
    "create_store",
]
