"""Resolution of prefixes and qualified names against a parsed registry."""

from __future__ import annotations

import logging
import sys
from collections import Counter
from typing import Literal, TextIO, overload

from .api import (
    ORIGINAL,
    MissingSchemeError,
    Snapshot,
    UnresolvedNamespaceError,
)
from .config import Configuration
from .utils import BIO2RDF_BASE, QName, normalize_prefix

__all__ = [
    "NoMatchLog",
    "PrefixResolver",
    "URIResolver",
]

logger = logging.getLogger(__name__)


class NoMatchLog:
    """A tally of prefixes that couldn't be resolved."""

    def __init__(self) -> None:
        """Initialize an empty log."""
        self.counter: Counter[str] = Counter()

    def add(self, prefix: str) -> int:
        """Count an unresolved prefix, warning the first time it's seen."""
        if prefix not in self.counter:
            logger.warning("Unable to map %s", prefix)
        self.counter[prefix] += 1
        return self.counter[prefix]

    def to_dict(self) -> dict[str, int]:
        """Get a copy of the counts."""
        return dict(self.counter)

    def clear(self) -> None:
        """Forget all unresolved prefixes."""
        self.counter.clear()

    def print(self, file: TextIO | None = None) -> None:
        """Print a notice for each unresolved prefix."""
        if file is None:
            file = sys.stdout
        for prefix, count in self.counter.items():
            print(
                f"NOTICE: Unable to find namespace {prefix} in registry: {count} occurrences",
                file=file,
            )

    def __len__(self) -> int:
        return len(self.counter)


class PrefixResolver:
    """Resolves prefixes to their preferred form."""

    def __init__(
        self,
        snapshot: Snapshot,
        configuration: Configuration,
        no_match: NoMatchLog | None = None,
    ) -> None:
        """Instantiate a prefix resolver.

        :param snapshot: The parsed registry
        :param configuration: The configuration, consulted for the unregistered namespace
            action on every lookup
        :param no_match: The log where unresolved prefixes are counted
        """
        self.snapshot = snapshot
        self.configuration = configuration
        self.no_match = NoMatchLog() if no_match is None else no_match

    def is_prefix(self, prefix: str) -> bool:
        """Check if the prefix is exactly a key in the registry."""
        return prefix in self.snapshot.entries

    # docstr-coverage:excused `overload`
    @overload
    def get_preferred_prefix(
        self, prefix: str, *, strict: Literal[True] = True, passthrough: bool = False
    ) -> str: ...

    # docstr-coverage:excused `overload`
    @overload
    def get_preferred_prefix(
        self, prefix: str, *, strict: Literal[False] = False, passthrough: Literal[True] = True
    ) -> str: ...

    # docstr-coverage:excused `overload`
    @overload
    def get_preferred_prefix(
        self, prefix: str, *, strict: Literal[False] = False, passthrough: Literal[False] = False
    ) -> str | None: ...

    def get_preferred_prefix(
        self, prefix: str, *, strict: bool = False, passthrough: bool = False
    ) -> str | None:
        """Get the preferred prefix.

        :param prefix: Any spelling of a prefix
        :param strict: If true and the prefix can't be resolved, raises an error
        :param passthrough: If true, strict is false, and the prefix can't be resolved,
            return the input
        :returns: The prefix itself if it's a key in the registry. Otherwise,
            the preferred prefix for its normalized form. Otherwise, none.
        :raises UnresolvedNamespaceError: If the prefix can't be resolved and either
            strict is true or the unregistered namespace action is ``die``
        """
        if self.is_prefix(prefix):
            return prefix
        rv = self.snapshot.aliases.get(normalize_prefix(prefix))
        if rv is not None:
            return rv
        self.no_match.add(prefix)
        if strict or self.configuration.unregistered_ns_action == "die":
            raise UnresolvedNamespaceError(prefix)
        if passthrough:
            return prefix
        return None


class URIResolver:
    """Builds fully-qualified URIs for qualified names."""

    def __init__(self, prefix_resolver: PrefixResolver) -> None:
        """Instantiate a URI resolver on top of a prefix resolver."""
        self.prefix_resolver = prefix_resolver

    @property
    def snapshot(self) -> Snapshot:
        """Get the parsed registry."""
        return self.prefix_resolver.snapshot

    @property
    def configuration(self) -> Configuration:
        """Get the configuration."""
        return self.prefix_resolver.configuration

    def map_qname(self, qname: str, delimiter: str = ":") -> str:
        """Map a qualified name (e.g. ``ko:K00001``) onto its preferred prefix (e.g. ``kegg:K00001``).

        If the prefix can't be resolved, the parsed qualified name is returned.
        """
        return self._map(qname, delimiter=delimiter).qname

    def _map(self, qname: str, delimiter: str = ":") -> QName:
        prefix, identifier = QName.from_qname(qname, delimiter=delimiter)
        preferred = self.prefix_resolver.get_preferred_prefix(prefix)
        if preferred is None:
            return QName(prefix, identifier)
        return QName(preferred, identifier)

    def get_fq_uri(self, qname: str, scheme: str | None = None) -> str | None:
        """Get the fully-qualified URI for a qualified name.

        :param qname: The qualified name
        :param scheme: The URI scheme to use. If none, the first available scheme
            from the configured priority is used.
        :returns: The fully-qualified URI. If the namespace must use its provider's URI
            but has none, returns none. If the namespace has no applicable scheme and
            the unregistered namespace action is ``fail``, returns none. Otherwise,
            falls back to a Bio2RDF URI.
        :raises MissingSchemeError: If the namespace doesn't have the explicitly requested
            scheme, or if it must use its provider's URI, has none, and the unregistered
            namespace action is ``die``
        """
        mapped = self._map(qname)
        ns, identifier = mapped
        entry = self.snapshot.entries.get(ns)

        if ns in self.configuration.default_uri_schemes:
            uri_prefix = entry.get_uri_prefix(ORIGINAL) if entry is not None else None
            if uri_prefix is not None:
                return uri_prefix + identifier
            # never a Bio2RDF URI for these
            if self.configuration.unregistered_ns_action == "die":
                raise MissingSchemeError(ns, ORIGINAL)
            logger.error("Unable to find a URI for %s: %s has no original URI", qname, ns)
            return None

        if scheme is not None:
            uri_prefix = entry.get_uri_prefix(scheme) if entry is not None else None
            if uri_prefix is None:
                raise MissingSchemeError(ns, scheme)
            return uri_prefix + identifier

        if entry is not None:
            for candidate in self.configuration.uri_scheme_priority:
                uri_prefix = entry.get_uri_prefix(candidate)
                if uri_prefix is not None:
                    return uri_prefix + identifier

        if self.configuration.unregistered_ns_action == "fail":
            logger.error("Unable to find a URI for %s", qname)
            return None
        return self.get_bio2rdf_uri(mapped.qname)

    @staticmethod
    def get_bio2rdf_uri(qname: str) -> str:
        """Get a Bio2RDF URI for the qualified name, as given."""
        return f"{BIO2RDF_BASE}{qname}"

    def get_mapped_bio2rdf_uri(self, qname: str) -> str:
        """Get a Bio2RDF URI for the qualified name, using its preferred prefix."""
        return self.get_bio2rdf_uri(self.map_qname(qname))

    def compress(self, uri: str) -> str | None:
        """Compress a URI into a qualified name using the provider and alternative URI prefixes.

        :param uri: A URI
        :returns: A qualified name using the preferred prefix, if the URI starts with
            any known URI prefix. Otherwise, none.
        """
        try:
            uri_prefix, prefix = self.snapshot.uri_index.longest_prefix_item(uri)
        except KeyError:
            return None
        return QName(prefix, uri[len(uri_prefix) :]).qname
