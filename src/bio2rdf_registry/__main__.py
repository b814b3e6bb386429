"""Run the :mod:`bio2rdf_registry` CLI with ``python -m bio2rdf_registry``."""

from .cli import main

if __name__ == "__main__":
    main()
