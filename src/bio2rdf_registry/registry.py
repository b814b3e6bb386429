"""The registry facade.

.. code-block:: python

    from bio2rdf_registry import Registry

    registry = Registry()
    registry.set_local_registry("/tmp/")
    registry.get_preferred_prefix("ko")  # 'kegg'
    registry.get_fq_uri("ko:K00001")  # 'http://bio2rdf.org/kegg:K00001'

The registry is downloaded (if the local copy is missing or stale) and parsed
the first time it's queried. After that, queries use the parsed copy until
:meth:`Registry.reset` is called.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Literal, TextIO, overload

from typing_extensions import Self

from .api import Entry, Snapshot, read_registry
from .config import Configuration, UnregisteredAction
from .resolver import NoMatchLog, PrefixResolver, URIResolver
from .sources import download, ensure_fresh

__all__ = [
    "Registry",
]

logger = logging.getLogger(__name__)


class Registry:
    """A dataset registry that resolves prefixes, qualified names, and URIs."""

    def __init__(self, configuration: Configuration | None = None, **kwargs: Any) -> None:
        """Instantiate a registry.

        :param configuration: A configuration. If none, one is created from the
            keyword arguments.
        :param kwargs: Keyword arguments passed to :class:`Configuration`
        """
        if configuration is None:
            configuration = Configuration(**kwargs)
        elif kwargs:
            configuration = Configuration.model_validate({**configuration.model_dump(), **kwargs})
        self.configuration = configuration
        self.no_match = NoMatchLog()
        self._snapshot: Snapshot | None = None
        self._prefix_resolver: PrefixResolver | None = None
        self._uri_resolver: URIResolver | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> Self:
        """Instantiate a registry with a configuration loaded from a JSON file."""
        return cls(Configuration.from_file(path))

    def initialize(self) -> Self:
        """Fetch the registry if need be, then parse it. Does nothing if already initialized.

        :raises FetchError: if the registry needs to be downloaded but can't be
        :raises CacheWriteError: if the downloaded registry can't be stored
        :raises ParseError: if the local copy of the registry can't be read
        """
        if self._snapshot is None:
            self.fetch_registry()
            snapshot = read_registry(self.get_local_registry_filename())
            self._prefix_resolver = PrefixResolver(snapshot, self.configuration, self.no_match)
            self._uri_resolver = URIResolver(self._prefix_resolver)
            self._snapshot = snapshot
            logger.debug("initialized registry with %d entries", len(snapshot.entries))
        return self

    def reset(self) -> None:
        """Forget the parsed registry so the next query initializes it again."""
        self._snapshot = None
        self._prefix_resolver = None
        self._uri_resolver = None

    @property
    def snapshot(self) -> Snapshot:
        """Get the parsed registry, initializing it if necessary."""
        self.initialize()
        return self._snapshot  # type:ignore[return-value]

    @property
    def prefix_resolver(self) -> PrefixResolver:
        """Get the prefix resolver, initializing the registry if necessary."""
        self.initialize()
        return self._prefix_resolver  # type:ignore[return-value]

    @property
    def uri_resolver(self) -> URIResolver:
        """Get the URI resolver, initializing the registry if necessary."""
        self.initialize()
        return self._uri_resolver  # type:ignore[return-value]

    def fetch_registry(self, *, force: bool = False) -> bool:
        """Download the registry if the local copy is missing or stale.

        :param force: If true, download regardless of the age of the local copy
        :returns: If the registry was downloaded
        """
        if force:
            download(
                self.configuration.remote_registry_url,
                self.get_local_registry_filename(),
                timeout=self.configuration.timeout,
            )
            return True
        return ensure_fresh(
            self.get_local_registry_filename(),
            self.configuration.remote_registry_url,
            self.configuration.cache_time,
            timeout=self.configuration.timeout,
        )

    # configuration

    def set_remote_registry_url(self, url: str) -> None:
        """Set the URL for the remote registry."""
        self.configuration.remote_registry_url = url

    def get_remote_registry_url(self) -> str:
        """Get the URL for the remote registry."""
        return self.configuration.remote_registry_url

    def set_local_registry(self, directory: str | Path) -> None:
        """Set the directory for the locally-cached registry."""
        self.configuration.local_registry_directory = directory  # type:ignore[assignment]

    def get_local_registry_filename(self) -> Path:
        """Get the location of the locally-cached registry file."""
        return self.configuration.local_registry_path

    def set_cache_time(self, cache_time_in_days: int) -> None:
        """Set the number of days to use a local copy of the registry. Zero means never update."""
        self.configuration.cache_time = int(cache_time_in_days)

    def get_cache_time(self) -> int:
        """Get the number of days to use a local copy of the registry."""
        return self.configuration.cache_time

    def set_unregistered_ns_action(self, action: UnregisteredAction) -> None:
        """Set what to do when a namespace isn't in the registry."""
        self.configuration.unregistered_ns_action = action

    def get_unregistered_ns_action(self) -> UnregisteredAction:
        """Get what to do when a namespace isn't in the registry."""
        return self.configuration.unregistered_ns_action

    def set_uri_scheme_priority(self, schemes: Sequence[str]) -> None:
        """Set the order in which URI schemes are tried."""
        self.configuration.uri_scheme_priority = list(schemes)

    def get_uri_scheme_priority(self) -> list[str]:
        """Get the order in which URI schemes are tried."""
        return self.configuration.uri_scheme_priority

    def set_default_uri_schemes(self, namespaces: str | Sequence[str]) -> None:
        """Set the namespaces that must use their provider's URI.

        :param namespaces: If a string, it's added to the existing namespaces.
            Otherwise, replaces them.
        """
        if isinstance(namespaces, str):
            self.configuration.default_uri_schemes = [
                *self.configuration.default_uri_schemes,
                namespaces,
            ]
        else:
            self.configuration.default_uri_schemes = list(namespaces)

    def get_default_uri_schemes(self) -> list[str]:
        """Get the namespaces that must use their provider's URI."""
        return self.configuration.default_uri_schemes

    # diagnostics

    def get_no_match_list(self) -> dict[str, int]:
        """Get the number of times each unresolved prefix was looked up."""
        return self.no_match.to_dict()

    def clear_no_match_list(self) -> None:
        """Clear the unresolved prefixes."""
        self.no_match.clear()

    def print_no_match_list(self, file: TextIO | None = None) -> None:
        """Print the unresolved prefixes."""
        self.no_match.print(file=file)

    # queries

    # docstr-coverage:excused `overload`
    @overload
    def get_entry(self, prefix: str, *, strict: Literal[True] = True) -> Entry: ...

    # docstr-coverage:excused `overload`
    @overload
    def get_entry(self, prefix: str, *, strict: Literal[False] = False) -> Entry | None: ...

    def get_entry(self, prefix: str, *, strict: bool = True) -> Entry | None:
        """Get the registry entry for a canonical prefix."""
        rv = self.snapshot.entries.get(prefix)
        if rv is None and strict:
            raise KeyError(f"could not find prefix: {prefix}")
        return rv

    def is_prefix(self, prefix: str) -> bool:
        """Check if the prefix is a canonical prefix in the registry."""
        return self.prefix_resolver.is_prefix(prefix)

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

        .. seealso:: :meth:`PrefixResolver.get_preferred_prefix`
        """
        return self.prefix_resolver.get_preferred_prefix(
            prefix, strict=strict, passthrough=passthrough
        )

    def map_qname(self, qname: str, delimiter: str = ":") -> str:
        """Map a qualified name onto its preferred prefix, or return it unchanged."""
        return self.uri_resolver.map_qname(qname, delimiter=delimiter)

    def get_fq_uri(self, qname: str, scheme: str | None = None) -> str | None:
        """Get the fully-qualified URI for a qualified name.

        .. seealso:: :meth:`URIResolver.get_fq_uri`
        """
        return self.uri_resolver.get_fq_uri(qname, scheme=scheme)

    def get_bio2rdf_uri(self, qname: str) -> str:
        """Get a Bio2RDF URI for the qualified name without resolving its prefix."""
        return URIResolver.get_bio2rdf_uri(qname)

    def get_mapped_bio2rdf_uri(self, qname: str) -> str:
        """Get a Bio2RDF URI for the qualified name, using its preferred prefix."""
        return self.uri_resolver.get_mapped_bio2rdf_uri(qname)

    def compress(self, uri: str) -> str | None:
        """Compress a URI into a qualified name using provider and alternative URI prefixes."""
        return self.uri_resolver.compress(uri)
