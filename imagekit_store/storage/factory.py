"""
Storage factory for creating ImageKit adapter instances.

Builds a fresh adapter from the host's configuration on every call; no
instance is cached at module level.
"""

from typing import Any, Mapping, Optional, Union

from pydantic.alias_generators import to_snake

from imagekit_store.config.settings import Settings, StoreConfig
from imagekit_store.storage.imagekit import ImageKitStore


def create_store(
    config: Union[StoreConfig, Mapping[str, Any], None] = None,
    settings: Optional[Settings] = None,
) -> ImageKitStore:
    """
    Create an ImageKit storage adapter.

    Values in ``config`` win. Content path, upload endpoint and timeout
    fall back to ``settings`` (read from the environment if not given).

    Args:
        config: Host storage configuration (camelCase or snake_case keys)
        settings: Process settings providing ambient defaults

    Returns:
        ImageKitStore instance
    """
    if isinstance(config, StoreConfig):
        return ImageKitStore(config)

    settings = settings or Settings()
    values = {
        "content_path": settings.content_path,
        "upload_endpoint": settings.upload_endpoint,
        "timeout": settings.request_timeout,
    }
    values.update({to_snake(key): value for key, value in (config or {}).items()})
    return ImageKitStore(StoreConfig.model_validate(values))
