"""Command-line interface for the users API service."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

import httpx
import yaml

from users_api.config import Settings, load_settings

logger = logging.getLogger("usersapi.main")

_DEFAULT_HEALTHCHECK_TIMEOUT = 3.0


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Users API service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve", config=None)

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Bind address for the API (default: HOST or 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: PORT or 3000)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML settings file (default: USERS_API_CONFIG)",
    )

    health_parser = subparsers.add_parser(
        "healthcheck", help="Probe a running service and exit non-zero when unhealthy"
    )
    health_parser.add_argument(
        "--url",
        default=None,
        help="Health endpoint to query (default: http://127.0.0.1:<port>/health)",
    )
    health_parser.add_argument(
        "--timeout",
        type=float,
        default=_DEFAULT_HEALTHCHECK_TIMEOUT,
        help="Seconds to wait for an answer (default: 3)",
    )
    health_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML settings file (default: USERS_API_CONFIG)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "healthcheck"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(settings: Settings, *, host: str | None, port: int | None) -> None:
    from users_api.service import create_app
    import uvicorn

    bind_host = host or settings.host
    bind_port = settings.port if port is None else port

    app = create_app(settings)
    logger.info(
        "Starting server on port %s (host=%s, environment=%s)",
        bind_port,
        bind_host,
        settings.environment,
    )
    uvicorn.run(
        app,
        host=bind_host,
        port=bind_port,
        log_level=settings.log_level.lower(),
    )


def _healthcheck(url: str, *, timeout: float) -> int:
    """Return 0 when ``url`` answers 200, 1 otherwise."""

    try:
        response = httpx.get(url, timeout=timeout)
    except httpx.HTTPError as exc:
        print(f"Health check failed: {exc}", file=sys.stderr)
        return 1

    if response.status_code != 200:
        print(
            f"Health check failed: {url} responded with {response.status_code}",
            file=sys.stderr,
        )
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if args.command == "serve":
        _serve(settings, host=args.host, port=args.port)
    elif args.command == "healthcheck":
        url = args.url or f"http://127.0.0.1:{settings.port}/health"
        raise SystemExit(_healthcheck(url, timeout=args.timeout))


if __name__ == "__main__":
    main()
