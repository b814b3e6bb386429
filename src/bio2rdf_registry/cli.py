# -*- coding: utf-8 -*-
# type:ignore

"""This package comes with a built-in CLI for querying the registry.

.. code-block::

    $ python -m bio2rdf_registry prefix ko GI
    $ python -m bio2rdf_registry uri ko:K00001 rdf:type
    $ python -m bio2rdf_registry uri --scheme bio2rdf go:0008150

The registry is downloaded into the directory given with ``--directory`` if the
local copy is missing or older than ``--cache-days``. Alternatively, all options
can be given as a JSON file with ``--config``.

Prefixes that couldn't be resolved are listed on stderr after each command.
"""

import json
import logging

import click

from bio2rdf_registry import Configuration, Registry, ResolutionError

__all__ = [
    "main",
]

CONFIG_OPTION = click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="A JSON configuration file. Other options override its values.",
)
URL_OPTION = click.option("--url", help="The URL of the remote registry")
DIRECTORY_OPTION = click.option(
    "--directory",
    type=click.Path(file_okay=False),
    help="The directory where the local copy of the registry is stored",
)
CACHE_DAYS_OPTION = click.option(
    "--cache-days",
    type=click.IntRange(min=0),
    help="The number of days before the local copy is downloaded again. Use 0 to never update.",
)
ACTION_OPTION = click.option(
    "--action",
    type=click.Choice(["continue", "die", "fail"]),
    help="What to do when a namespace isn't in the registry",
)
VERBOSE_OPTION = click.option("-v", "--verbose", is_flag=True, help="Show debug logging")


def _get_registry(config, url, directory, cache_days, action) -> Registry:
    configuration = Configuration.from_file(config) if config else Configuration()
    overrides = {
        "remote_registry_url": url,
        "local_registry_directory": directory,
        "cache_time": cache_days,
        "unregistered_ns_action": action,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(configuration, key, value)
    return Registry(configuration)


def registry_options(func):
    """Add the shared options for building a registry."""
    for option in reversed(
        [CONFIG_OPTION, URL_OPTION, DIRECTORY_OPTION, CACHE_DAYS_OPTION, ACTION_OPTION]
    ):
        func = option(func)
    return func


def _finish(registry: Registry) -> None:
    for prefix, count in registry.get_no_match_list().items():
        click.secho(
            f"Unable to find namespace {prefix} in registry: {count} occurrences",
            fg="yellow",
            err=True,
        )


def _echo_all(registry: Registry, inputs, func) -> None:
    """Echo each input next to its result, stopping on a resolution error."""
    for value in inputs:
        try:
            result = func(value)
        except ResolutionError as e:
            _finish(registry)
            click.secho(f"{value}: {e}", fg="red", err=True)
            raise click.exceptions.Exit(1) from e
        click.echo(f"{value}\t{result or ''}")
    _finish(registry)


@click.group()
@VERBOSE_OPTION
def main(verbose: bool):
    """Run the `bio2rdf_registry` CLI."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@main.command()
@registry_options
@click.argument("prefixes", nargs=-1, required=True)
def prefix(prefixes, config, url, directory, cache_days, action):
    """Print the preferred prefix for each prefix."""
    registry = _get_registry(config, url, directory, cache_days, action)
    _echo_all(registry, prefixes, registry.get_preferred_prefix)


@main.command(name="map")
@registry_options
@click.option("--delimiter", default=":", show_default=True)
@click.argument("qnames", nargs=-1, required=True)
def map_qnames(qnames, delimiter, config, url, directory, cache_days, action):
    """Print each qualified name using its preferred prefix."""
    registry = _get_registry(config, url, directory, cache_days, action)
    _echo_all(registry, qnames, lambda qname: registry.map_qname(qname, delimiter=delimiter))


@main.command()
@registry_options
@click.option("--scheme", help="The URI scheme to use, like original, bio2rdf, or identifiers.org")
@click.argument("qnames", nargs=-1, required=True)
def uri(qnames, scheme, config, url, directory, cache_days, action):
    """Print the fully-qualified URI for each qualified name."""
    registry = _get_registry(config, url, directory, cache_days, action)
    _echo_all(registry, qnames, lambda qname: registry.get_fq_uri(qname, scheme=scheme))


@main.command()
@registry_options
@click.argument("uris", nargs=-1, required=True)
def compress(uris, config, url, directory, cache_days, action):
    """Print the qualified name for each URI."""
    registry = _get_registry(config, url, directory, cache_days, action)
    for u in uris:
        click.echo(f"{u}\t{registry.compress(u) or ''}")


@main.command()
@registry_options
@click.argument("prefix")
def entry(prefix, config, url, directory, cache_days, action):
    """Print the registry entry for a prefix as JSON."""
    registry = _get_registry(config, url, directory, cache_days, action)
    preferred = registry.get_preferred_prefix(prefix)
    if preferred is None:
        click.secho(f"{prefix} is not in the registry", fg="red", err=True)
        raise click.exceptions.Exit(1)
    click.echo(json.dumps(registry.get_entry(preferred).model_dump(), indent=2))


@main.command()
@registry_options
def refresh(config, url, directory, cache_days, action):
    """Download the registry, regardless of the age of the local copy."""
    registry = _get_registry(config, url, directory, cache_days, action)
    registry.fetch_registry(force=True)
    click.echo(f"Downloaded registry to {registry.get_local_registry_filename()}")


if __name__ == "__main__":
    main()
