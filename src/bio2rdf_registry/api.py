"""Data structures and parsing for :mod:`bio2rdf_registry`."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field
from pytrie import StringTrie

from .utils import BIO2RDF_BASE, normalize_prefix

__all__ = [
    "COLUMNS",
    "CacheWriteError",
    "Entry",
    "FetchError",
    "MissingSchemeError",
    "ParseError",
    "RegistryError",
    "RegistryUnavailableError",
    "ResolutionError",
    "Snapshot",
    "UnresolvedNamespaceError",
    "parse_registry",
    "read_registry",
]

logger = logging.getLogger(__name__)

#: The columns of the registry spreadsheet, in order
COLUMNS = (
    "preferredPrefix",
    "alternatePrefix",
    "providerURI",
    "alternateURI",
    "miriam",
    "bioportal",
    "datahub",
    "abbreviation",
    "title",
    "description",
    "pubmed",
    "organization",
    "type",
    "keywords",
    "homepage",
    "homepage_up",
    "subnamespace",
    "partOfCollection",
    "license",
    "licenseText",
    "rights",
    "id_regex",
    "example_id",
    "html_template",
    "unused",
    "miriam_notes",
    "miriam_coverage",
    "miriam_updates",
    "unused_2",
)
#: Only the first columns are carried over into an entry
N_DESCRIPTIVE_COLUMNS = 24

ORIGINAL = "original"
BIO2RDF = "bio2rdf"
IDENTIFIERS_ORG = "identifiers.org"
IDENTIFIERS_ORG_BASE = "http://identifiers.org/"
SYNTHETIC_SUFFIXES = ("_vocabulary", "_resource")

#: Columns that have dedicated fields on :class:`Entry`
_FIELD_COLUMNS = {
    "preferredPrefix",
    "alternatePrefix",
    "providerURI",
    "alternateURI",
    "miriam",
    "id_regex",
}


class RegistryError(Exception):
    """The base class for errors in this package."""


class RegistryUnavailableError(RegistryError):
    """An error raised when the registry can't be loaded. The registry can't be used without it."""


class FetchError(RegistryUnavailableError):
    """An error raised when the remote registry can't be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        """Initialize the error."""
        self.url = url
        self.reason = reason

    def __str__(self) -> str:
        return f"unable to get remote registry file from {self.url}: {self.reason}"


class CacheWriteError(RegistryUnavailableError):
    """An error raised when the local copy of the registry can't be written."""

    def __init__(self, path: Path) -> None:
        """Initialize the error."""
        self.path = path

    def __str__(self) -> str:
        return f"unable to save local registry file {self.path}"


class ParseError(RegistryUnavailableError):
    """An error raised when the local copy of the registry can't be read."""

    def __init__(self, path: Path) -> None:
        """Initialize the error."""
        self.path = path

    def __str__(self) -> str:
        return f"unable to open {self.path}"


class ResolutionError(RegistryError, ValueError):
    """An error raised on resolution of a single prefix or qname."""


class UnresolvedNamespaceError(ResolutionError):
    """An error raised when a prefix has neither a canonical nor an alias mapping."""

    def __init__(self, prefix: str) -> None:
        """Initialize the error."""
        self.prefix = prefix

    def __str__(self) -> str:
        return f"unable to find namespace {self.prefix} in registry"


class MissingSchemeError(ResolutionError):
    """An error raised when a namespace doesn't have the URI scheme that was asked for."""

    def __init__(self, prefix: str, scheme: str) -> None:
        """Initialize the error."""
        self.prefix = prefix
        self.scheme = scheme

    def __str__(self) -> str:
        return f"namespace {self.prefix} has no {self.scheme} URI scheme"


class Entry(BaseModel):
    """A namespace in the registry and the URI schemes derived for it."""

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(..., title="Preferred prefix")
    alternate_prefixes: list[str] = Field(
        default_factory=list,
        title="Alternate prefixes",
        description="Synonyms with their parenthetical annotations removed",
    )
    provider_uri: str | None = Field(default=None, title="Provider base URI")
    alternate_uris: list[str] = Field(default_factory=list, title="Alternative base URIs")
    miriam: str | None = Field(
        default=None,
        description="A cross-reference to identifiers.org. Only its presence is used.",
    )
    pattern: str | None = Field(
        default=None,
        description="The regular expression for local identifiers. Not used for resolution.",
    )
    metadata: dict[str, str] = Field(
        default_factory=dict,
        description="The remaining descriptive columns, keyed by column name",
    )
    schemes: dict[str, str] = Field(
        default_factory=dict,
        description="A mapping from URI scheme names to URI prefixes",
    )
    synthetic: bool = Field(
        default=False,
        description="Is this a vocabulary or resource namespace derived from another entry?",
    )

    def get_uri_prefix(self, scheme: str) -> str | None:
        """Get the URI prefix for the given scheme, if available."""
        return self.schemes.get(scheme)


class Snapshot(NamedTuple):
    """The lookup structures built from one parse of the registry."""

    #: A mapping from canonical prefixes to entries
    entries: Mapping[str, Entry]
    #: A mapping from normalized prefix spellings to canonical prefixes
    aliases: Mapping[str, str]
    #: A trie from provider and alternative URI prefixes to canonical prefixes
    uri_index: StringTrie


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _strip_annotation(synonym: str) -> str:
    """Remove a parenthetical annotation, like in ``ko(KEGG Orthology)``."""
    return synonym.split("(", 1)[0].strip()


def _pad(row: list[str]) -> list[str]:
    if len(row) < len(COLUMNS):
        return row + [""] * (len(COLUMNS) - len(row))
    return row


def _iter_rows(text: str) -> Iterable[list[str]]:
    reader = csv.reader(io.StringIO(text))
    next(reader, None)  # skip the header
    for row in reader:
        if not row or not row[0].strip():
            continue
        yield _pad(row)


def _synthetic_entries(prefix: str) -> Iterable[Entry]:
    for suffix in SYNTHETIC_SUFFIXES:
        key = f"{prefix}{suffix}"
        yield Entry(prefix=key, schemes={BIO2RDF: f"{BIO2RDF_BASE}{key}:"}, synthetic=True)


def _entry_from_row(row: list[str]) -> Entry:
    prefix = row[0].strip()
    provider_uri = row[2].strip()
    miriam = row[4].strip()

    schemes = {}
    if provider_uri:
        schemes[ORIGINAL] = provider_uri
    schemes[BIO2RDF] = f"{BIO2RDF_BASE}{prefix}:"
    if miriam:
        # TODO add the namespace-specific path segment once the registry carries it
        schemes[IDENTIFIERS_ORG] = IDENTIFIERS_ORG_BASE

    alternate_prefixes = []
    for synonym in row[1].split(","):
        if not synonym.strip():
            continue
        synonym = _strip_annotation(synonym)
        if synonym:
            alternate_prefixes.append(synonym)

    return Entry(
        prefix=prefix,
        alternate_prefixes=alternate_prefixes,
        provider_uri=provider_uri or None,
        alternate_uris=_split_list(row[3]) if provider_uri else [],
        miriam=miriam or None,
        pattern=row[21] or None,
        metadata={
            key: value
            for key, value in zip(COLUMNS[:N_DESCRIPTIVE_COLUMNS], row)
            if key not in _FIELD_COLUMNS and value
        },
        schemes=schemes,
    )


def parse_registry(text: str) -> Snapshot:
    """Parse the CSV contents of the registry.

    :param text: The contents of a registry spreadsheet, including its header row
    :returns: A snapshot containing the entries, the alias map, and the URI index

    >>> snapshot = parse_registry("header\\nkegg,ko(KEGG Orthology),http://kegg.jp/\\n")
    >>> snapshot.aliases["ko"]
    'kegg'
    >>> snapshot.entries["kegg"].schemes["bio2rdf"]
    'http://bio2rdf.org/kegg:'
    >>> snapshot.entries["kegg_vocabulary"].synthetic
    True
    """
    entries: dict[str, Entry] = {}
    aliases: dict[str, str] = {}
    uri_index: dict[str, str] = {}
    for row in _iter_rows(text):
        entry = _entry_from_row(row)
        prefix = entry.prefix
        if prefix in entries:
            logger.debug("overwriting duplicate registry row for %s", prefix)
        entries[prefix] = entry
        for synthetic_entry in _synthetic_entries(prefix):
            entries[synthetic_entry.prefix] = synthetic_entry

        aliases[normalize_prefix(prefix)] = prefix
        for synonym in entry.alternate_prefixes:
            normalized = normalize_prefix(synonym)
            if normalized:
                aliases[normalized] = prefix

        if entry.provider_uri:
            uri_index[entry.provider_uri] = prefix
            for alternate_uri in entry.alternate_uris:
                uri_index[alternate_uri] = prefix

    logger.debug("parsed %d registry entries and %d aliases", len(entries), len(aliases))
    return Snapshot(
        entries=MappingProxyType(entries),
        aliases=MappingProxyType(aliases),
        uri_index=StringTrie(uri_index),
    )


def read_registry(path: str | Path) -> Snapshot:
    """Read and parse a local copy of the registry.

    :raises ParseError: if the file can't be opened or isn't valid UTF-8
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(path) from e
    return parse_registry(text)
