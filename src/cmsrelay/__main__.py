"""cms-oauth-relay entry point.

Loads settings from the environment, runs the origin safety check and serves
the relay with uvicorn.
"""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from pydantic import ValidationError

from cmsrelay.config import InsecureOriginError, Settings, check_origin_config
from cmsrelay.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _version() -> str:
    try:
        return get_version("cms-oauth-relay")
    except PackageNotFoundError:
        from cmsrelay import __version__

        return __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmsrelay",
        description="OAuth2 code relay that hands a GitHub token to a browser CMS",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from the environment (or a .env file):
  OAUTH_CLIENT_ID, OAUTH_CLIENT_SECRET, REDIRECT_URI, ORIGIN, SCOPE,
  PROVIDER, PORT, NODE_ENV

Examples:
  cmsrelay                      Serve on $PORT (default 4000)
  cmsrelay --port 8080          Serve on port 8080
  cmsrelay --check-config       Validate configuration and exit
""",
    )
    parser.add_argument("--host", type=str, default=None, help="Bind address (default: $HOST)")
    parser.add_argument(
        "--port", "-p", type=int, default=None, help="Listen port (default: $PORT or 4000)"
    )
    parser.add_argument("--dev", action="store_true", help="Development mode with auto-reload")
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate configuration and the origin allow-list, then exit",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {_version()}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    setup_logging(level="INFO")

    try:
        settings = Settings()
    except ValidationError as e:
        logger.error("Invalid configuration:\n%s", e)
        return 1

    setup_logging(level=settings.log_level)

    try:
        check_origin_config(settings)
    except InsecureOriginError:
        return 1

    if args.check_config:
        logger.info(
            "Configuration OK (provider=%s, origins=%s)",
            settings.provider,
            ", ".join(settings.allowed_origins) or "-",
        )
        return 0

    from cmsrelay.server import run_server

    run_server(settings, host=args.host, port=args.port, dev=args.dev)
    return 0


if __name__ == "__main__":
    sys.exit(main())
