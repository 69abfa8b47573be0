"""
Minimal async client for the ImageKit upload and delivery APIs.

Only the calls the storage adapter needs are implemented: a multipart
upload authenticated with the private key, and plain GETs against
delivery URLs. Every failure surfaces as ImageKitError.
"""

import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from imagekit_store.config.settings import DEFAULT_UPLOAD_ENDPOINT

logger = logging.getLogger(__name__)


class ImageKitError(Exception):
    """
    Error returned by the remote image API.

    Attributes:
        status_code: HTTP status of the failed response, or None when no
            usable response was received (network failure, timeout,
            malformed body)
        message: Provider-reported message, if any
    """

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or "ImageKit request failed")
        self.status_code = status_code
        self.message = message


class UploadResult(BaseModel):
    """Subset of the upload response the adapter relies on."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore")

    url: str
    file_id: Optional[str] = None
    name: Optional[str] = None
    file_path: Optional[str] = None
    thumbnail_url: Optional[str] = None
    size: Optional[int] = None
    file_type: Optional[str] = None


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None


class ImageKitClient:
    """
    ImageKit API client.

    Each call opens its own short-lived httpx.AsyncClient, so an instance
    holds nothing but credentials and can be shared between tasks.
    """

    def __init__(
        self,
        private_key: str = "",
        upload_endpoint: str = DEFAULT_UPLOAD_ENDPOINT,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            private_key: Private API key used for server-side uploads
            upload_endpoint: Upload API URL
            timeout: Timeout in seconds for every request
            transport: Optional httpx transport (used to stub the API)
        """
        self.private_key = private_key
        self.upload_endpoint = upload_endpoint
        self.timeout = timeout
        self._transport = transport

    def _client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout, transport=self._transport, **kwargs)

    async def upload(
        self,
        file: bytes,
        file_name: str,
        folder: str = "/",
        use_unique_file_name: bool = True,
        tags: Optional[List[str]] = None,
    ) -> UploadResult:
        """
        Upload file content.

        Args:
            file: Raw file bytes
            file_name: Name to store the file under
            folder: Destination folder
            use_unique_file_name: Let ImageKit suffix the name to avoid clashes
            tags: Tags attached to the file

        Returns:
            Parsed upload response

        Raises:
            ImageKitError: If the upload is rejected or the request fails
        """
        data = {
            "fileName": file_name,
            "folder": folder,
            "useUniqueFileName": "true" if use_unique_file_name else "false",
        }
        if tags:
            data["tags"] = ",".join(tags)

        try:
            async with self._client(auth=(self.private_key, "")) as client:
                response = await client.post(
                    self.upload_endpoint,
                    data=data,
                    files={"file": (file_name, file)},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ImageKitError(f"Upload request failed: {e}") from e

        if response.is_error:
            raise ImageKitError(
                _error_message(response), status_code=response.status_code)

        try:
            result = UploadResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ImageKitError("Unexpected upload response") from e

        logger.debug(f"Uploaded {file_name} to {result.file_path or folder}")
        return result

    async def fetch(self, url: str) -> bytes:
        """
        GET a delivery URL and return the body.

        Raises:
            ImageKitError: On a non-2xx response or transport failure
        """
        try:
            async with self._client(follow_redirects=True) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ImageKitError(f"Request to {url} failed: {e}") from e

        if response.is_error:
            raise ImageKitError(
                _error_message(response), status_code=response.status_code)
        return response.content
