"""Exporter runtime entrypoint.

This module provides the ``sentry-exporter`` command and the ASGI
application factory Granian loads in each worker. The command validates the
configuration file up front, then hands the stable
``sentry_exporter.runtime:create_app`` entrypoint to Granian.

Configuration is driven by flags, with environment variable fallbacks:

- ``--config.file`` / ``SENTRY_EXPORTER_CONFIG_FILE``: Configuration file
  (default ``sentry_exporter.yml``)
- ``--web.listen-address`` / ``SENTRY_EXPORTER_LISTEN_ADDRESS``: Address to
  listen on (default ``:9412``)
- ``--log.level`` / ``SENTRY_EXPORTER_LOG_LEVEL``: Log level (default
  ``INFO``)

Run the service directly with ``python -m sentry_exporter.runtime``.
"""

from __future__ import annotations

import argparse
import os
import typing as typ

from sentry_exporter.config import ConfigStore, ConfigValidationError
from sentry_exporter.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from sentry_exporter.version import exporter_version

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main", "parse_listen_address"]

logger = get_logger(__name__)

CONFIG_FILE_ENV = "SENTRY_EXPORTER_CONFIG_FILE"
LISTEN_ADDRESS_ENV = "SENTRY_EXPORTER_LISTEN_ADDRESS"
LOG_LEVEL_ENV = "SENTRY_EXPORTER_LOG_LEVEL"

DEFAULT_CONFIG_FILE = "sentry_exporter.yml"
DEFAULT_LISTEN_ADDRESS = ":9412"
_ALL_INTERFACES = "0.0.0.0"  # noqa: S104 - exporters listen on every interface

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(
            logger,
            "Invalid listen port: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address; an empty host binds all interfaces.

    Raises
    ------
    SystemExit
        If the address has no port or the port is invalid.

    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        log_error(logger, "Invalid listen address %r: expected host:port", address)
        raise SystemExit(1)
    host = host.strip("[]") or _ALL_INTERFACES
    return host, _parse_port(port_str)


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application for one server worker.

    Loads the file named by ``SENTRY_EXPORTER_CONFIG_FILE``. Each worker
    owns its configuration store and project cache.

    Raises
    ------
    SystemExit
        If the configuration file cannot be loaded.

    """
    from sentry_exporter.api.app import AppDependencies
    from sentry_exporter.api.app import create_app as _create_api_app

    config_file = os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE)
    try:
        store = ConfigStore.load(config_file)
    except ConfigValidationError as exc:
        log_error(logger, "Error loading config %s: %s", config_file, exc)
        raise SystemExit(1) from exc
    return _create_api_app(AppDependencies(config_store=store))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sentry-exporter",
        description="Prometheus exporter probing a Sentry organization.",
    )
    parser.add_argument(
        "--config.file",
        dest="config_file",
        default=os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE),
        help="Sentry exporter configuration file.",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=os.environ.get(LISTEN_ADDRESS_ENV, DEFAULT_LISTEN_ADDRESS),
        help="The address to listen on for HTTP requests.",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default=os.environ.get(LOG_LEVEL_ENV, "INFO"),
        help="Only log messages with the given severity or above.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {exporter_version()}",
    )
    return parser


def main(argv: typ.Sequence[str] | None = None) -> None:
    """Start the exporter server using Granian.

    Raises
    ------
    SystemExit
        If the configuration or listen address is invalid.

    """
    from granian import Granian
    from granian.constants import Interfaces

    args = _build_parser().parse_args(argv)

    normalized_level, invalid_level = configure_logging(args.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            args.log_level,
            normalized_level,
        )

    try:
        ConfigStore.load(args.config_file)
    except ConfigValidationError as exc:
        log_error(logger, "Error loading config %s: %s", args.config_file, exc)
        raise SystemExit(1) from exc
    os.environ[CONFIG_FILE_ENV] = args.config_file

    host, port = parse_listen_address(args.listen_address)
    log_info(
        logger,
        "Starting sentry_exporter %s on %s:%d (log_level=%s)",
        exporter_version(),
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "sentry_exporter.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
