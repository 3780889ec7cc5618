"""Configuration models used by the bootstrap composer.

BootstrapConfig

`title`, `description`, `author` (`str`)
: Document metadata handed to the bootstrap template.

`keywords`, `robots` (`list[str]`)
: Values rendered into the corresponding ``<meta>`` tags.

`favicon` (`str`)
: URL of the page icon.

`dependencies` (`list[str]`)
: Extra dependency entries appended after the resolved component
  dependencies. Entries may be asset paths or ready-made tags.

`charset` (`str`)
: Default charset used to encode flushed output. An explicit ``charset``
  parameter on the response content type takes precedence.

`content_type` (`str | None`)
: Initial content type of the response, e.g. ``text/html; charset=latin-1``.

`mode` (`async | sync`)
: Render mode of the host; selects the no-script fallback.

`length` (`int`)
: Initial outstanding fragment count.

`child` (`str`)
: Name of the component nested directly under the bootstrap.

`name` (`str`)
: Fragment name used for the bootstrap head.

`id` (`str`)
: Instance identifier, generated when omitted.

`template` (`str`)
: Template reference rendered for the bootstrap head.

`marker_attribute` (`str`)
: Attribute identifying where a child's content belongs in its parent.

`unmatched` (`retry | drop`)
: Policy applied to fragments outside the designated root's tree.

RequestInfo

`path` (`str | None`)
: Path of the current request; used to build the no-script refresh URL.

`query` (`dict[str, Any]`)
: Parsed query string of the current request.
"""

from __future__ import annotations

import codecs
from collections.abc import Mapping
from pathlib import Path
import tomllib
from typing import Any
from urllib.parse import parse_qs, urlsplit
import uuid

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .content_type import DEFAULT_CHARSET, parse_charset
from .exceptions import ConfigurationError
from .fallback import RenderMode
from .markers import DEFAULT_MARKER_ATTRIBUTE
from .reducer import UnmatchedPolicy


CONFIG_TABLE = "pipesmith"


def _generate_id() -> str:
    return uuid.uuid4().hex


class BootstrapConfig(BaseModel):
    """Per-response settings of the bootstrap composer."""

    model_config = ConfigDict(extra="forbid")

    title: str = "Pipesmith"
    description: str = "Default description for Pipesmith's pagelets"
    keywords: list[str] = Field(default_factory=lambda: ["Pipesmith", "pagelets", "bootstrap"])
    robots: list[str] = Field(default_factory=lambda: ["index", "follow"])
    favicon: str = "/favicon.ico"
    author: str = "Pipesmith"
    dependencies: list[str] = Field(default_factory=list)
    charset: str = Field(default=DEFAULT_CHARSET, min_length=1)
    content_type: str | None = None
    mode: RenderMode = RenderMode.ASYNC
    length: int = 0
    child: str = "root"
    name: str = Field(default="bootstrap", min_length=1)
    id: str = Field(default_factory=_generate_id)
    template: str = "bootstrap.html"
    marker_attribute: str = Field(default=DEFAULT_MARKER_ATTRIBUTE, min_length=1)
    unmatched: UnmatchedPolicy = UnmatchedPolicy.RETRY

    @field_validator("charset")
    @classmethod
    def _validate_charset(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"Unknown charset '{value}'.") from exc
        return value

    @field_validator("content_type")
    @classmethod
    def _validate_content_type_charset(cls, value: str | None) -> str | None:
        charset = parse_charset(value)
        if charset is None:
            return value
        try:
            codecs.lookup(charset)
        except LookupError as exc:
            raise ValueError(f"Unknown charset '{charset}' in content type.") from exc
        return value


class RequestInfo(BaseModel):
    """Subset of the incoming request needed to build the fallback."""

    model_config = ConfigDict(extra="forbid")

    path: str | None = None
    query: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str) -> RequestInfo:
        """Build request info from a URL, flattening single-valued parameters."""
        parts = urlsplit(url)
        query: dict[str, Any] = {}
        for key, values in parse_qs(parts.query, keep_blank_values=True).items():
            query[key] = values[0] if len(values) == 1 else values
        path = parts.path or None
        if path and parts.scheme and parts.netloc:
            path = f"{parts.scheme}://{parts.netloc}{path}"
        return cls(path=path, query=query)


def _parse_config_text(text: str, suffix: str) -> Any:
    if suffix == ".toml":
        return tomllib.loads(text)
    return yaml.safe_load(text)


def load_config(path: Path, *, overrides: Mapping[str, Any] | None = None) -> BootstrapConfig:
    """Load a bootstrap configuration from a TOML or YAML file.

    Settings may sit at the top level or under a ``pipesmith`` table.
    """
    try:
        content = _parse_config_text(path.read_text(encoding="utf-8"), path.suffix.lower())
    except OSError as exc:
        raise ConfigurationError(f"Failed to read configuration: {exc}") from exc
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid configuration file '{path}': {exc}") from exc

    if content is None:
        content = {}
    if not isinstance(content, Mapping):
        raise ConfigurationError(f"Configuration file '{path}' must contain a mapping.")

    section = content.get(CONFIG_TABLE, content)
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"'{CONFIG_TABLE}' in '{path}' must be a mapping.")

    data = dict(section)
    data.update(overrides or {})
    try:
        return BootstrapConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Configuration validation failed: {exc}") from exc


__all__ = ["CONFIG_TABLE", "BootstrapConfig", "RequestInfo", "load_config"]
