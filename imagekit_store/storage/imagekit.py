"""
ImageKit storage backend.

Uploads images to ImageKit and answers reads and existence checks with
live requests against the configured URL endpoint. Nothing is cached
locally; only the ``images`` directory under the content path is served
from disk, for assets that were never uploaded (e.g. theme images).
"""

import logging
import time
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import anyio.to_thread
import httpx
from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles

from imagekit_store.common.logging_config import PerformanceTracker
from imagekit_store.common.metrics import track_storage_operation
from imagekit_store.config.settings import StoreConfig
from imagekit_store.storage.adapter import (
    AdapterError,
    ASGIApp,
    Image,
    ReadOptions,
    StorageAdapter,
)
from imagekit_store.storage.client import ImageKitClient, ImageKitError
from imagekit_store.storage.paths import (
    build_url,
    get_target_dir,
    join_path,
    sanitize_file_name,
    to_posix,
)

logger = logging.getLogger(__name__)

ONE_YEAR_SECONDS = 365 * 24 * 60 * 60

DELETE_UNSUPPORTED_MESSAGE = (
    "Currently, deleting a file by path is not possible via the API."
)
SAVE_FAILED_MESSAGE = "Failed to save image"


class ImageStaticFiles(StaticFiles):
    """StaticFiles that marks every served file as cacheable for a year."""

    def __init__(self, *args, max_age: int = ONE_YEAR_SECONDS, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_age = max_age

    def file_response(self, *args, **kwargs) -> Response:
        response = super().file_response(*args, **kwargs)
        response.headers.setdefault(
            "cache-control", f"public, max-age={self.max_age}")
        return response


class ImageKitStore(StorageAdapter):
    """
    Storage adapter persisting images to ImageKit.

    Configuration is resolved once at construction and never changed, so a
    single instance can serve concurrent requests.
    """

    def __init__(
        self,
        config: Union[StoreConfig, Mapping[str, Any], None] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the adapter.

        Args:
            config: StoreConfig or the host's raw configuration mapping
            transport: Optional httpx transport for the remote client
        """
        if not isinstance(config, StoreConfig):
            config = StoreConfig.model_validate(dict(config or {}))
        self.config = config

        self.url_endpoint = config.auth.url_endpoint
        self.enable_dated_folders = config.enable_dated_folders
        self.upload_options = config.upload_options
        self.images_path = Path(config.content_path) / "images"

        self._imagekit = ImageKitClient(
            private_key=config.auth.private_key,
            upload_endpoint=config.upload_endpoint,
            timeout=config.timeout,
            transport=transport,
        )

    def _url_for(self, path: str) -> str:
        return build_url(self.url_endpoint, path)

    def _folder_for(self, target_dir: Optional[str]) -> str:
        if target_dir:
            folder = target_dir
        elif self.enable_dated_folders:
            folder = get_target_dir(self.upload_options.folder)
        else:
            folder = self.upload_options.folder
        return to_posix(folder) if folder else "/"

    @track_storage_operation("exists")
    async def exists(self, file_name: str, target_dir: Optional[str] = None) -> bool:
        logger.debug(f"exists {file_name} {target_dir}")
        try:
            url = self._url_for(join_path(target_dir, file_name))
            with PerformanceTracker("imagekit.fetch", logger, url=url):
                content = await self._imagekit.fetch(url)
        except (ImageKitError, httpx.InvalidURL):
            return False
        return bool(content)

    @track_storage_operation("save")
    async def save(self, image: Image, target_dir: Optional[str] = None) -> str:
        """
        Upload an image and return its URL.

        The folder is ``target_dir`` if given, else the configured folder
        (with a ``YYYY/MM`` suffix when dated folders are enabled). When
        unique file names are off, ``updatedAt=<epoch ms>`` is appended so
        clients don't keep a stale copy of an overwritten file.
        """
        logger.debug(f"save {image.name}")
        folder = self._folder_for(target_dir)
        file_name = sanitize_file_name(image.name)

        try:
            file = await anyio.to_thread.run_sync(Path(image.path).read_bytes)
        except OSError as e:
            raise AdapterError(
                500, f"Failed to read image from '{image.path}'") from e

        try:
            with PerformanceTracker(
                "imagekit.upload", logger, file_name=file_name, folder=folder
            ):
                result = await self._imagekit.upload(
                    file,
                    file_name,
                    folder=folder,
                    use_unique_file_name=self.upload_options.use_unique_file_name,
                    tags=list(self.upload_options.tags),
                )
        except ImageKitError as e:
            raise AdapterError(
                e.status_code or 500, e.message or SAVE_FAILED_MESSAGE) from e

        if self.upload_options.use_unique_file_name:
            return result.url

        try:
            url = httpx.URL(result.url)
        except httpx.InvalidURL as e:
            raise AdapterError(500, SAVE_FAILED_MESSAGE) from e
        return str(url.copy_add_param("updatedAt", str(int(time.time() * 1000))))

    def serve(self) -> ASGIApp:
        """
        Return an ASGI handler serving files from ``<content_path>/images``.

        A miss (including a missing directory) is answered with an empty 404
        by the handler itself.
        """
        images_path = self.images_path
        static_files = ImageStaticFiles(directory=images_path, check_dir=False)

        async def handler(scope, receive, send) -> None:
            logger.debug(f"serve {scope.get('path')}")
            try:
                if not images_path.is_dir():
                    raise HTTPException(status_code=404)
                response = await static_files.get_response(
                    static_files.get_path(scope), scope)
            except HTTPException as exc:
                if exc.status_code == 404:
                    logger.error("file not found")
                response = Response(
                    status_code=exc.status_code, headers=exc.headers)
            await response(scope, receive, send)

        return handler

    @track_storage_operation("delete")
    async def delete(self, file_name: str, target_dir: Optional[str] = None) -> bool:
        logger.debug(f"delete {file_name} {target_dir}")
        raise AdapterError(400, DELETE_UNSUPPORTED_MESSAGE)

    @track_storage_operation("read")
    async def read(self, options: Union[ReadOptions, Mapping[str, Any], None] = None) -> bytes:
        if isinstance(options, Mapping):
            options = ReadOptions(path=options.get("path") or "")
        path = options.path if options else ""
        logger.debug(f"read {path}")

        message = f"Failed to read image from path '{path}'"
        try:
            url = self._url_for(path)
            with PerformanceTracker("imagekit.fetch", logger, url=url):
                return await self._imagekit.fetch(url)
        except ImageKitError as e:
            raise AdapterError(e.status_code or 500, message) from e
        except httpx.InvalidURL as e:
            raise AdapterError(500, message) from e
