"""Configuration management for Flex Pinot using Pydantic.

Settings come from (highest precedence first) command-line flags, an optional
YAML config file, ``FLEX_PINOT_*`` environment variables / ``.env``, and
finally interactive prompts. Everything is assembled into an immutable
RunConfig before the import starts.
"""

import base64
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flex_pinot.client.exceptions import InputError


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="WARNING",
        description="Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    file: str | None = Field(default=None, description="Log file path")
    format: str = Field(default="json", description="Log file format (json or console)")
    max_payload_size: int = Field(
        default=10000,
        ge=100,
        le=1000000,
        description="Maximum payload size (characters) to log in verbose mode",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "console"]
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Log format must be one of: {', '.join(valid_formats)}")
        return v_lower


class FlexInstanceConfig(BaseModel):
    """Connection settings for a Flex instance."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Flex API base URL")
    username: str = Field(..., description="Flex username")
    password: str = Field(..., repr=False, description="Flex password")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    timeout: int = Field(default=30, ge=1, le=600, description="Request timeout in seconds")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate and normalize URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username is not empty."""
        if not v or v.strip() == "":
            raise ValueError("Username cannot be empty")
        return v.strip()

    @property
    def basic_auth(self) -> str:
        """Base64 token for the HTTP Basic ``Authorization`` header."""
        raw = f"{self.username}:{self.password}".encode()
        return base64.b64encode(raw).decode("ascii")


class ImportOptions(BaseModel):
    """Behaviour flags for one import run."""

    model_config = ConfigDict(frozen=True)

    dry_run: bool = Field(default=False, description="Validate but don't execute API calls")
    verbose: bool = Field(default=False, description="Log payloads and responses")
    skip_validation: bool = Field(
        default=False, description="Skip existence checks for resources and dependencies"
    )
    force: bool = Field(default=False, description="Create resources even if they already exist")

    @property
    def check_existing(self) -> bool:
        """Whether to refuse creating a resource whose name is already taken."""
        return not (self.skip_validation or self.dry_run or self.force)

    @property
    def check_dependencies(self) -> bool:
        """Whether to verify workflow, owner and metadata ids before creating inboxes."""
        return not (self.skip_validation or self.dry_run)


class RunConfig(BaseModel):
    """Immutable configuration for a single import run."""

    model_config = ConfigDict(frozen=True)

    flex: FlexInstanceConfig
    options: ImportOptions = Field(default_factory=ImportOptions)
    max_payload_size: int = Field(default=10000, ge=100)


class ToolSettings(BaseSettings):
    """Settings read from the environment and an optional YAML file."""

    model_config = SettingsConfigDict(
        env_prefix="FLEX_PINOT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(default=None, description="Flex API base URL")
    username: str | None = Field(default=None, description="Flex username")
    password: str | None = Field(default=None, repr=False, description="Flex password")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    timeout: int = Field(default=30, ge=1, le=600, description="Request timeout in seconds")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )


def load_settings(config_path: str | Path | None = None) -> ToolSettings:
    """Load tool settings from the environment and an optional YAML file.

    Values in the YAML file win over environment variables.

    Args:
        config_path: Optional path to a YAML configuration file

    Returns:
        ToolSettings: Loaded settings

    Raises:
        InputError: If the file is missing, unparseable or invalid
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise InputError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InputError(f"Invalid configuration file {config_path}: {e}") from e

        if not isinstance(config_data, dict):
            raise InputError(f"Configuration file must contain a mapping: {config_path}")

        config_data = _expand_env_vars(config_data)

    try:
        return ToolSettings(**config_data)
    except ValidationError as e:
        raise InputError(f"Invalid configuration: {e}") from e


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ``${VAR_NAME}`` references in config values.

    Args:
        data: Parsed configuration data

    Returns:
        Data with environment variables substituted

    Raises:
        InputError: If a referenced variable is not set
    """
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        if data.startswith("${") and data.endswith("}"):
            var_name = data[2:-1]
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise InputError(
                    f"Environment variable '{var_name}' not found. "
                    f"Please set it in your environment or .env file."
                )
            return env_value
        return data
    else:
        return data


def build_run_config(
    url: str,
    username: str,
    password: str,
    options: ImportOptions,
    settings: ToolSettings | None = None,
) -> RunConfig:
    """Assemble the immutable run configuration.

    Raises:
        InputError: If the connection settings are invalid
    """
    settings = settings or ToolSettings()
    try:
        flex = FlexInstanceConfig(
            url=url,
            username=username,
            password=password,
            verify_ssl=settings.verify_ssl,
            timeout=settings.timeout,
        )
    except ValidationError as e:
        errors = "; ".join(err["msg"] for err in e.errors())
        raise InputError(f"Invalid connection settings: {errors}") from e

    return RunConfig(
        flex=flex,
        options=options,
        max_payload_size=settings.logging.max_payload_size,
    )
