"""Version information for :mod:`bio2rdf_registry`."""

__all__ = [
    "VERSION",
    "get_version",
]

VERSION = "0.3.1-dev"


def get_version() -> str:
    """Get the :mod:`bio2rdf_registry` version string."""
    return VERSION
