"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_DOWNLOAD_DIR = "downloads"


class FetchConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Worker pool
    max_workers: int = 5
    poll_interval: float = 0.5

    # Fetch Settings
    download_dir: str = DEFAULT_DOWNLOAD_DIR
    connect_timeout: float = 10.0
    total_timeout: float = 20.0
    fallback_extension: str = "bin"
    chunk_size: int = 131072  # 128 KB

    # HTTP adapter
    host: str = "127.0.0.1"
    port: int = 8080

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("download_dir")
    @classmethod
    def validate_download_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("Download directory cannot be empty.")
        return v

    @field_validator("connect_timeout", "total_timeout", "poll_interval")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts and intervals must be greater than zero.")
        return v

    @field_validator("fallback_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Accepts 'bin' or '.bin' and stores the bare extension."""
        v = v.lstrip(".")
        if not v or not v.isalnum():
            raise ValueError(
                f"Fallback extension must be alphanumeric, but got: '{v}'"
            )
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v < 1024 or v > 8 * 1024 * 1024:
            raise ValueError("Chunk size must be between 1 KB and 8 MB.")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535.")
        return v

    @model_validator(mode="after")
    def validate_timeouts(self) -> "FetchConfig":
        """The connect phase is part of the total operation budget."""
        if self.connect_timeout > self.total_timeout:
            raise ValueError(
                f"Connect timeout ({self.connect_timeout}s) cannot exceed the "
                f"total timeout ({self.total_timeout}s)."
            )
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
