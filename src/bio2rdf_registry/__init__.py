# -*- coding: utf-8 -*-

"""Resolve dataset prefixes and qualified names with the Bio2RDF dataset registry."""

from .api import (
    CacheWriteError,
    Entry,
    FetchError,
    MissingSchemeError,
    ParseError,
    RegistryError,
    RegistryUnavailableError,
    ResolutionError,
    Snapshot,
    UnresolvedNamespaceError,
    parse_registry,
    read_registry,
)
from .config import Configuration
from .registry import Registry
from .resolver import NoMatchLog, PrefixResolver, URIResolver
from .sources import ensure_fresh
from .utils import QName, normalize_prefix, parse_qname
from .version import get_version

__all__ = [
    "Registry",
    "Configuration",
    "Entry",
    "Snapshot",
    "QName",
    "NoMatchLog",
    "PrefixResolver",
    "URIResolver",
    "get_version",
    "normalize_prefix",
    "parse_qname",
    # i/o
    "ensure_fresh",
    "parse_registry",
    "read_registry",
    # errors
    "RegistryError",
    "RegistryUnavailableError",
    "FetchError",
    "CacheWriteError",
    "ParseError",
    "ResolutionError",
    "UnresolvedNamespaceError",
    "MissingSchemeError",
]
