# Configuration management

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_snake
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore

DEFAULT_UPLOAD_ENDPOINT = "https://upload.imagekit.io/api/v1/files/upload"


def normalize_flag(value: Any, default: bool = True) -> bool:
    """
    Normalize a boolean-like option.

    Only the string ``"false"`` and the boolean ``False`` disable a flag;
    every other value enables it. ``None`` falls back to ``default``.
    """
    if value is None:
        return default
    if value is False or str(value) == "false":
        return False
    return True


class Settings(BaseSettings):
    """Process-level settings read from the environment and ``.env``."""

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True

    # Storage
    content_path: str = "content"
    upload_endpoint: str = DEFAULT_UPLOAD_ENDPOINT
    request_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="IMAGEKIT_STORE_",
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


class AuthSettings(BaseSettings):
    """
    ImageKit credentials.

    Values passed explicitly win; anything missing is read from
    IMAGEKIT_STORE_URL_ENDPOINT, IMAGEKIT_STORE_PRIVATE_KEY and
    IMAGEKIT_STORE_PUBLIC_KEY, and finally defaults to an empty string.
    Credentials are not validated here; a bad key fails on the first
    remote call.
    """

    url_endpoint: str = ""
    private_key: str = ""
    public_key: str = ""

    model_config = SettingsConfigDict(
        env_prefix="IMAGEKIT_STORE_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("url_endpoint", "private_key", "public_key", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class UploadOptions(BaseModel):
    """Options forwarded with every upload."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True)

    use_unique_file_name: bool = True
    tags: List[str] = Field(default_factory=list)
    folder: str = "/"

    @field_validator("use_unique_file_name", mode="before")
    @classmethod
    def _normalize_unique(cls, value: Any) -> bool:
        return normalize_flag(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return value

    @field_validator("folder", mode="before")
    @classmethod
    def _default_folder(cls, value: Any) -> Any:
        return "/" if value is None else value


class StoreConfig(BaseModel):
    """
    Adapter configuration, passed in by the host at construction time.

    Accepts the host's camelCase shape::

        {
            "auth": {"urlEndpoint": ..., "privateKey": ..., "publicKey": ...},
            "uploadOptions": {"useUniqueFileName": ..., "tags": [...], "folder": ...},
            "enableDatedFolders": ...
        }

    as well as snake_case keys. Instances are immutable.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True)

    auth: AuthSettings = Field(default_factory=AuthSettings)
    upload_options: UploadOptions = Field(default_factory=UploadOptions)
    enable_dated_folders: bool = True

    content_path: str = "content"
    upload_endpoint: str = DEFAULT_UPLOAD_ENDPOINT
    timeout: Optional[float] = 30.0

    @field_validator("auth", mode="before")
    @classmethod
    def _resolve_auth(cls, value: Any) -> Any:
        # Build through AuthSettings() so missing keys fall back to the env
        if value is None:
            return AuthSettings()
        if isinstance(value, dict):
            explicit = {
                to_snake(key): item
                for key, item in value.items()
                if item is not None
            }
            return AuthSettings(**explicit)
        return value

    @field_validator("upload_options", mode="before")
    @classmethod
    def _default_upload_options(cls, value: Any) -> Any:
        return UploadOptions() if value is None else value

    @field_validator("enable_dated_folders", mode="before")
    @classmethod
    def _normalize_dated_folders(cls, value: Any) -> bool:
        return normalize_flag(value)
