"""CLI entry point for the scopegate server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from scopegate.config.settings import Settings


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="scopegate",
        description="scopegate — version-adaptive Elasticsearch gateway",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"scopegate {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP API server")
    serve.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    serve.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload for development")

    verify = subparsers.add_parser("verify", help="Detect the version of a configured server")
    verify.add_argument("server_id", help="Id of a server from the configuration")

    args = parser.parse_args(argv)

    log_level = (args.log_level or "info").upper()
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings = _load_settings(args.config)
    if args.log_level:
        settings.observability.log_level = args.log_level

    if args.command == "verify":
        sys.exit(asyncio.run(_verify(settings, args.server_id)))

    if args.command in (None, "serve"):
        _serve(settings, args, log_level)


def _load_settings(config: str | None) -> Settings:
    if not config:
        return Settings()
    config_path = Path(config)
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    return Settings.from_yaml(config_path)


def _serve(settings: Settings, args: argparse.Namespace, log_level: str) -> None:
    if getattr(args, "host", None):
        settings.server.host = args.host
    if getattr(args, "port", None):
        settings.server.port = args.port
    if getattr(args, "workers", None):
        settings.server.workers = args.workers
    reload = getattr(args, "reload", False)

    import uvicorn

    from scopegate.api.app import create_app

    if reload or settings.server.workers > 1:
        # import-string mode; each worker loads settings from env / scopegate-config.yaml
        uvicorn.run(
            "scopegate.api.app:create_app",
            factory=True,
            host=settings.server.host,
            port=settings.server.port,
            workers=1 if reload else settings.server.workers,
            reload=reload,
            log_level=log_level.lower(),
        )
        return

    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level=log_level.lower(),
    )


async def _verify(settings: Settings, server_id: str) -> int:
    """Verify one server and print the result as JSON. Returns the exit code."""
    from scopegate.clients.base.exceptions import ConnectionError
    from scopegate.core.gateway import ScopeGateway
    from scopegate.models.server import VerifyResult

    gateway = ScopeGateway(settings)
    try:
        result = await gateway.verify(server_id)
    except ConnectionError as e:
        result = VerifyResult(success=False, error=str(e))
    finally:
        await gateway.shutdown()

    print(result.model_dump_json(indent=2, exclude_none=True))
    return 0 if result.success else 1


def _get_version() -> str:
    """Get the package version."""
    try:
        from scopegate import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
