"""
=============================================================================
TINYHTTPD CLI ENTRY POINT
=============================================================================

    # Run with defaults (localhost:6969, serving ./srv)
    python -m tinyhttpd

    # Custom port and document root
    python -m tinyhttpd --port 8000 --root ./public

    # Refuse paths that escape the document root
    python -m tinyhttpd --confine-to-root

Settings come from (highest priority first): command-line flags,
TINYHTTPD_* environment variables, built-in defaults.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .exceptions import BindError
from .server import Server


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser. Flags left unset default to None so env values survive."""
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal single-threaded static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                        # localhost:6969, ./srv
  python -m tinyhttpd --port 8000            # Custom port
  python -m tinyhttpd --root ./public        # Custom document root
  python -m tinyhttpd --confine-to-root      # Block ../ escapes
        """
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: localhost)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 6969)"
    )

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Document root to serve files from (default: ./srv)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--confine-to-root",
        action="store_true",
        help="Refuse request paths that resolve outside the document root"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Layer command-line flags over the environment-derived configuration."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.root is not None:
        config.doc_root = args.root
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.confine_to_root:
        config.confine_to_root = True

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = Server(config)
    except (ValueError, BindError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    server.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
