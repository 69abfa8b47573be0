# Test configuration

import json
import os
import re
import sys
from typing import Callable, List, Optional

import httpx
import pytest

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from imagekit_store.config.settings import StoreConfig  # noqa: E402

URL_ENDPOINT = "https://ik.imagekit.io/demo"
UPLOAD_ENDPOINT = "https://upload.imagekit.io/api/v1/files/upload"

AUTH_ENV_VARS = (
    "IMAGEKIT_STORE_URL_ENDPOINT",
    "IMAGEKIT_STORE_PRIVATE_KEY",
    "IMAGEKIT_STORE_PUBLIC_KEY",
)


def form_field(request: httpx.Request, name: str) -> Optional[str]:
    """Extract a plain form field from a multipart request body."""
    pattern = re.compile(
        rb'name="' + re.escape(name.encode()) + rb'"\r\n\r\n(.*?)\r\n--',
        re.DOTALL,
    )
    match = pattern.search(request.content)
    return match.group(1).decode() if match else None


class FakeImageKit:
    """
    In-memory stand-in for the ImageKit upload and delivery endpoints.

    Uploaded files become fetchable at ``<URL_ENDPOINT>/<folder>/<fileName>``.
    """

    def __init__(self):
        self.files = {}
        self.requests: List[httpx.Request] = []
        self.upload_error: Optional[httpx.Response] = None
        self.fetch_error: Optional[Callable[[httpx.Request], httpx.Response]] = None

    @property
    def uploads(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def fetches(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return self._upload(request)
        if self.fetch_error is not None:
            return self.fetch_error(request)
        path = request.url.path
        if path in self.files:
            return httpx.Response(200, content=self.files[path])
        return httpx.Response(404, json={"message": "Not found"})

    def _upload(self, request: httpx.Request) -> httpx.Response:
        if self.upload_error is not None:
            return self.upload_error
        file_name = form_field(request, "fileName")
        folder = (form_field(request, "folder") or "/").strip("/")
        file_path = "/" + "/".join(p for p in (folder, file_name) if p)
        match = re.search(rb'filename="[^"]*"\r\n(?:[^\r\n]*\r\n)*\r\n(.*?)\r\n--',
                          request.content, re.DOTALL)
        self.files["/demo" + file_path] = match.group(1) if match else b""
        return httpx.Response(200, json={
            "fileId": "file_123",
            "name": file_name,
            "url": URL_ENDPOINT + file_path,
            "filePath": file_path,
            "thumbnailUrl": URL_ENDPOINT + "/tr:n-ik_ml_thumbnail" + file_path,
            "size": len(self.files["/demo" + file_path]),
            "fileType": "image",
        })

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(autouse=True)
def clean_auth_env(monkeypatch):
    """Keep credentials from the developer's environment out of tests."""
    for name in AUTH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_imagekit():
    return FakeImageKit()


@pytest.fixture
def store_config(tmp_path):
    """Base adapter configuration pointing at the fake API."""
    return {
        "auth": {
            "urlEndpoint": URL_ENDPOINT,
            "privateKey": "private_test_key",
            "publicKey": "public_test_key",
        },
        "uploadOptions": {
            "useUniqueFileName": True,
            "tags": ["blog"],
            "folder": "/uploads",
        },
        "enableDatedFolders": False,
        "contentPath": str(tmp_path / "content"),
        "uploadEndpoint": UPLOAD_ENDPOINT,
    }


@pytest.fixture
def make_store(store_config, fake_imagekit):
    """Factory building an ImageKitStore against the fake API with overrides."""
    from imagekit_store.storage.imagekit import ImageKitStore

    def _make(**overrides):
        config = json.loads(json.dumps(store_config))
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value
        return ImageKitStore(StoreConfig.model_validate(config),
                             transport=fake_imagekit.transport)

    return _make


@pytest.fixture
def image_file(tmp_path):
    """A small image on disk, as the host's temp upload would be."""
    path = tmp_path / "upload_tmp"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-image-bytes")
    return path
