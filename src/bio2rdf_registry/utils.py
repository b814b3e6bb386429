"""Utilities for working with prefixes and qualified names."""

from __future__ import annotations

import re
from typing import NamedTuple

from typing_extensions import Self

__all__ = [
    "BIO2RDF_BASE",
    "QName",
    "normalize_prefix",
    "parse_qname",
]

#: The base of every Bio2RDF URI
BIO2RDF_BASE = "http://bio2rdf.org/"

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def normalize_prefix(prefix: str) -> str:
    """Normalize a prefix for lookup in the alias map.

    :param prefix: Any spelling of a prefix
    :returns: The prefix, lowercased and stripped of everything that isn't a
        lowercase ASCII letter or a digit

    >>> normalize_prefix(" KEGG.Orthology ")
    'keggorthology'
    >>> normalize_prefix("ncbi_gi")
    'ncbigi'
    """
    return _NON_ALPHANUMERIC.sub("", prefix.strip().lower())


class QName(NamedTuple):
    """A pair of a prefix and an identifier in that namespace.

    >>> QName.from_qname("GI:12345")
    QName(prefix='gi', identifier='12345')

    A string without a delimiter is interpreted as a bare prefix:

    >>> QName.from_qname(" kegg ")
    QName(prefix='kegg', identifier='')
    """

    prefix: str
    identifier: str

    @property
    def qname(self) -> str:
        """Get the qualified name string.

        >>> QName("kegg", "K00001").qname
        'kegg:K00001'
        """
        return f"{self.prefix}:{self.identifier}"

    @classmethod
    def from_qname(cls, qname: str, *, delimiter: str = ":") -> Self:
        """Parse a qualified name on the first appearance of the delimiter."""
        prefix, sep, identifier = qname.partition(delimiter)
        if not sep:
            return cls(qname.strip(), "")
        return cls(prefix.strip().lower(), identifier)


def parse_qname(qname: str, delimiter: str = ":") -> QName:
    """Parse a qualified name (e.g., ``GI:12345``) into its prefix and identifier."""
    return QName.from_qname(qname, delimiter=delimiter)
