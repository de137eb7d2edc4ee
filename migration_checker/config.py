"""
Loading and validation of migration_checker run settings.

Pydantic describes both run configurations (crawl and validate); every
invalid value is rejected up front with :class:`ConfigError`, before any
network activity happens.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Type, TypeVar, Union
from urllib.parse import urlparse, urlunparse

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

__all__ = (
    "ConfigError",
    "CrawlerConfig",
    "ValidatorConfig",
    "RendererType",
    "DEFAULT_FLARESOLVERR_URL",
    "DIRECT_TIMEOUT_MS",
    "RENDERER_TIMEOUT_MS",
    "build_config",
    "load_settings",
)

RendererType = Literal["static", "flaresolverr"]

DEFAULT_FLARESOLVERR_URL = "http://localhost:8191/v1"
DIRECT_TIMEOUT_MS = 10_000
RENDERER_TIMEOUT_MS = 60_000


class ConfigError(ValueError):
    """Invalid run parameters. Fatal: raised before any request is sent."""


def _check_http_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"URL must use http or https protocol: {value!r}")
    return value


class _RunConfig(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    concurrency: int = Field(5, ge=1, strict=True, description="Number of parallel requests.")
    timeout: int = Field(
        DIRECT_TIMEOUT_MS,
        ge=0,
        strict=True,
        description="Per-request timeout in milliseconds (0 disables it).",
    )
    output_path: Optional[str] = Field(None, description="Where the JSON artifact is written.")
    verbose: bool = Field(False, description="Log every URL, not only progress.")
    renderer: RendererType = Field("static", description="static or flaresolverr.")
    flaresolverr_url: str = Field(DEFAULT_FLARESOLVERR_URL, description="Rendering proxy endpoint.")

    @field_validator("flaresolverr_url")
    @classmethod
    def _renderer_url(cls, v: str) -> str:
        return _check_http_url(v)

    @model_validator(mode="before")
    @classmethod
    def _default_timeout(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("timeout") is None:
            # the rendering proxy drives a real browser and needs far longer
            renderer = data.get("renderer", "static")
            value = RENDERER_TIMEOUT_MS if renderer == "flaresolverr" else DIRECT_TIMEOUT_MS
            data = {**data, "timeout": value}
        return data

    def to_json_dict(self) -> Dict[str, Any]:
        """Form stored under the ``config`` key of the artifacts."""
        return self.model_dump(by_alias=True, mode="json")


class CrawlerConfig(_RunConfig):
    """Settings for one crawl of the source site."""

    source_url: str = Field(..., description="Root URL the crawl starts from.")
    max_depth: int = Field(10, ge=0, strict=True, description="Maximum link depth from the source URL.")
    delay: int = Field(100, ge=0, strict=True, description="Pause after every request (milliseconds).")
    exclude_patterns: List[str] = Field(
        default_factory=list, description="Case-insensitive regexes of URLs to skip."
    )

    @field_validator("source_url")
    @classmethod
    def _source(cls, v: str) -> str:
        _check_http_url(v)
        parsed = urlparse(v)
        return urlunparse(parsed._replace(path=parsed.path or "/"))

    @field_validator("exclude_patterns")
    @classmethod
    def _patterns_compile(cls, v: List[str]) -> List[str]:
        for pattern in v:
            try:
                re.compile(pattern, re.IGNORECASE)
            except re.error as exc:
                raise ValueError(f"invalid exclude pattern {pattern!r}: {exc}") from exc
        return v


class ValidatorConfig(_RunConfig):
    """Settings for validating a crawl against the destination site."""

    input_path: str = Field(..., description="Crawl output JSON to validate.")
    destination_url: str = Field(..., description="Base URL of the migrated site.")
    redirect_handling: Literal["ok", "warning"] = Field(
        "warning", description="Whether a path-changing redirect is a warning."
    )

    @field_validator("destination_url")
    @classmethod
    def _destination(cls, v: str) -> str:
        _check_http_url(v)
        parsed = urlparse(v)
        return f"{parsed.scheme}://{parsed.netloc}{parsed.path.rstrip('/')}"


_ConfigT = TypeVar("_ConfigT", bound=_RunConfig)


def build_config(model: Type[_ConfigT], data: Mapping[str, Any]) -> _ConfigT:
    """Validate *data* into *model*, turning pydantic errors into :class:`ConfigError`."""
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def load_settings(path: Union[str, Path]) -> dict[str, Any]:
    """
    Read a YAML or JSON settings file with optional ``crawl`` and
    ``validate`` sections. Raises FileNotFoundError if the file is missing.
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ConfigError(f"Unsupported settings format: {suffix}")

    for section in ("crawl", "validate"):
        if not isinstance(data.get(section, {}), dict):
            raise ConfigError(f"Section '{section}' in {path_obj} must be a mapping")
    return data
