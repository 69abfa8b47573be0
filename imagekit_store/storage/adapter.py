"""
Storage adapter interface required by the host.

Defines the operations every storage backend must provide, the
descriptors the host passes in, and the single error type backends raise.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

ASGIApp = Callable[[Any, Any, Any], Awaitable[None]]


class AdapterError(Exception):
    """Exception raised by storage adapters, carrying an HTTP-style status code."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self) -> str:
        return f"AdapterError(status_code={self.status_code!r}, message={self.message!r})"


@dataclass(frozen=True)
class Image:
    """An uploaded image as handed over by the host."""
    name: str
    path: str


@dataclass(frozen=True)
class ReadOptions:
    path: str = ""


class StorageAdapter(ABC):
    """
    Interface for host storage backends.

    The host depends only on these five operations; implementations
    (e.g. ImageKitStore) provide them against their own backing store.
    """

    @abstractmethod
    async def exists(self, file_name: str, target_dir: Optional[str] = None) -> bool:
        """
        Check whether a file exists.

        Args:
            file_name: Name of the file
            target_dir: Optional directory the file lives in

        Returns:
            True if the file exists, False otherwise. Never raises.
        """
        pass

    @abstractmethod
    async def save(self, image: Image, target_dir: Optional[str] = None) -> str:
        """
        Store an uploaded image.

        Args:
            image: Image descriptor (original name and local temp path)
            target_dir: Optional directory overriding the default placement

        Returns:
            Public URL of the stored image

        Raises:
            AdapterError: If the image cannot be read or stored
        """
        pass

    @abstractmethod
    def serve(self) -> ASGIApp:
        """Return an ASGI handler serving locally stored images."""
        pass

    @abstractmethod
    async def delete(self, file_name: str, target_dir: Optional[str] = None) -> bool:
        """
        Delete a file.

        Raises:
            AdapterError: If deletion fails or is unsupported
        """
        pass

    @abstractmethod
    async def read(self, options: Optional[ReadOptions] = None) -> bytes:
        """
        Read a file's raw bytes.

        Args:
            options: Read options holding the file path

        Returns:
            File content

        Raises:
            AdapterError: If the file cannot be fetched
        """
        pass
