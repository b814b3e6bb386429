"""Reusable configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Self, TypeAlias

from .sources import REGISTRY_FILE_NAME, REMOTE_REGISTRY_URL

__all__ = [
    "DEFAULT_URI_SCHEMES",
    "URI_SCHEME_PRIORITY",
    "Configuration",
    "UnregisteredAction",
]

#: The action taken when a namespace isn't in the registry
UnregisteredAction: TypeAlias = Literal["continue", "die", "fail"]

#: The default order in which URI schemes are tried
URI_SCHEME_PRIORITY = ["original", "bio2rdf", "identifiers.org"]

#: Namespaces that always use their provider's URI
DEFAULT_URI_SCHEMES = ["xsd", "rdf", "rdfs", "owl", "void", "dc"]


class Configuration(BaseModel):
    """A model for where the registry comes from and how it's used for resolution."""

    model_config = ConfigDict(validate_assignment=True)

    remote_registry_url: str = Field(
        default=REMOTE_REGISTRY_URL, description="The URL of the CSV export of the registry"
    )
    local_registry_directory: Path = Field(
        default_factory=Path,
        description="The directory where the local copy of the registry is stored",
    )
    cache_time: int = Field(
        default=1,
        ge=0,
        description="The number of days before a local copy is downloaded again. "
        "Zero means the local copy is never updated.",
    )
    timeout: float | None = Field(
        default=60, description="The number of seconds to wait on the remote registry"
    )
    unregistered_ns_action: UnregisteredAction = Field(
        default="continue",
        description="What to do when a namespace isn't in the registry. 'continue' returns "
        "a best-effort result, 'die' raises an error, and 'fail' gives no URI.",
    )
    uri_scheme_priority: list[str] = Field(
        default_factory=lambda: list(URI_SCHEME_PRIORITY),
        description="The URI schemes to try, in order",
    )
    default_uri_schemes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_URI_SCHEMES),
        description="Namespaces that must use the provider's URI",
    )

    @field_validator("remote_registry_url")
    @classmethod
    def url_not_empty(cls, v: str) -> str:
        """Check that the remote registry URL isn't empty."""
        if not v or not v.strip():
            raise ValueError("null or empty remote registry URL")
        return v

    @field_validator("local_registry_directory", mode="before")
    @classmethod
    def directory_not_empty(cls, v: str | Path) -> str | Path:
        """Check that the local registry directory isn't empty."""
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("null or empty local registry file location")
        return v

    @property
    def local_registry_path(self) -> Path:
        """Get the path to the local copy of the registry."""
        return self.local_registry_directory.joinpath(REGISTRY_FILE_NAME)

    @classmethod
    def from_file(cls, path: str | Path) -> Self:
        """Load a configuration from a JSON file."""
        path = Path(path).expanduser().resolve()
        return cls.model_validate_json(path.read_text())

    def to_file(self, path: str | Path) -> None:
        """Write the parts of the configuration that differ from the defaults to a JSON file."""
        path = Path(path).expanduser().resolve()
        path.write_text(
            json.dumps(
                self.model_dump(mode="json", exclude_defaults=True),
                sort_keys=True,
                indent=2,
            )
        )
