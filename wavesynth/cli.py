"""
Command Line Interface
======================

``wavesynth build`` renders the front-end into a static asset directory.
``wavesynth serve`` serves that directory together with the API.

Serve flags follow Go's flag conventions, so ``-port 8080`` and
``--port 8080`` are equivalent.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from wavesynth import __version__
from wavesynth.config.logging import get_logger
from wavesynth.config.settings import Settings

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavesynth",
        description="Waveform composer: build the static front-end or serve it.",
        allow_abbrev=False,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subcommands = parser.add_subparsers(dest="command", required=True)

    build = subcommands.add_parser("build", help="Build the static front-end", allow_abbrev=False)
    mode = build.add_mutually_exclusive_group()
    mode.add_argument(
        "--release", dest="release", action="store_true", default=True, help="Release build"
    )
    mode.add_argument("--debug", dest="release", action="store_false", help="Debug build")
    build.add_argument(
        "--output", "-o", type=Path, default=Path("dist"), help="Output directory (default: dist)"
    )
    build.add_argument("--git-hash", default=None, help="Use this hash instead of calling git")
    build.add_argument("--repository-url", default=None, help="Repository URL for commit links")

    serve = subcommands.add_parser("serve", help="Serve the front-end and API", allow_abbrev=False)
    serve.add_argument("-port", "--port", type=int, default=None, help="Port to listen on")
    serve.add_argument("-host", "--host", default=None, help="Interface to bind")
    serve.add_argument(
        "-path", "--path", type=Path, default=None, help="Directory to serve (server root)"
    )
    serve.add_argument(
        "-fallback", "--fallback", default=None, help="File served for unknown paths"
    )
    serve.add_argument(
        "-https-promote",
        "--https-promote",
        dest="https_promote",
        action="store_true",
        default=None,
        help="Redirect HTTP requests to HTTPS",
    )
    serve.add_argument(
        "-enable-logging",
        "--enable-logging",
        dest="enable_logging",
        action="store_true",
        default=None,
        help="Log every request",
    )
    serve.add_argument(
        "-enable-health",
        "--enable-health",
        dest="enable_health",
        action="store_true",
        default=None,
        help="Expose GET /health",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Settings from the environment, with flags given on the command line on top."""
    overrides: Dict[str, Any] = {
        "port": args.port,
        "host": args.host,
        "server_root": args.path,
        "fallback": args.fallback,
        "https_promote": args.https_promote,
        "enable_logging": args.enable_logging,
        "enable_health": args.enable_health,
    }
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


def run_build(args: argparse.Namespace) -> int:
    from wavesynth.core.build.builder import AssetBuildError, build_assets

    try:
        manifest = build_assets(
            args.output,
            release=args.release,
            git_hash=args.git_hash,
            repository_url=args.repository_url,
        )
    except AssetBuildError as e:
        logger.error("Build failed", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Built {len(manifest.files)} files ({manifest.mode.value}) into {args.output}")
    return 0


def run_serve(args: argparse.Namespace) -> int:
    from wavesynth.api.main import run_server

    run_server(settings_from_args(args))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "build":
        return run_build(args)
    return run_serve(args)


if __name__ == "__main__":
    sys.exit(main())
