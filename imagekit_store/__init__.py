"""ImageKit storage adapter for content-management hosts."""

from imagekit_store.storage import (
    AdapterError,
    Image,
    ImageKitStore,
    ReadOptions,
    StorageAdapter,
    create_store,
)

__version__ = "0.1.0"

__all__ = [
    "AdapterError",
    "Image",
    "ImageKitStore",
    "ReadOptions",
    "StorageAdapter",
    "create_store",
]
