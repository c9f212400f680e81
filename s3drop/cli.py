"""Command line interface for s3drop."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.logging import RichHandler

from . import __version__
from .cli_progress import (
    BatchUploadProgressDisplay,
    render_configuration_summary,
    render_delete_result,
    render_entries,
)
from .errors import CLIError
from .models import UploadConfig

if TYPE_CHECKING:
    from .server.config import ServerSettings


DEFAULT_API_URL = "http://127.0.0.1:8000"

# Client and storage libraries that flood INFO/DEBUG output during uploads
LIBRARY_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "urllib3")


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Route s3drop logs through rich.

    Silent unless --debug, --log-level or S3DROP_LOG_LEVEL is given. HTTP and
    storage library loggers are held at WARNING outside debug mode.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    logging.disable(logging.NOTSET)

    log_level = log_level or os.getenv("S3DROP_LOG_LEVEL")
    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if debug else logging.WARNING)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load S3DROP_* and S3_* variables from a .env file into the environment."""
    if not path.is_file():
        raise CLIError(f"env file not found: {path}")
    load_dotenv(path, override=override, encoding="utf-8")


def _server_settings() -> ServerSettings:
    from .server.config import ServerSettings

    try:
        return ServerSettings.from_env()
    except ValidationError as exc:
        raise CLIError(f"invalid server settings: {exc}") from exc


def _resolve_api_url(cli_value: Optional[str]) -> str:
    return (cli_value or os.getenv("S3DROP_API_URL") or DEFAULT_API_URL).rstrip("/")


async def _run_upload(
    api_url: str,
    paths: List[Path],
    recursive: bool,
    config: UploadConfig,
    live: bool = True,
) -> int:
    from .orchestrator import FileCollector, UploadOrchestrator

    try:
        files = FileCollector.collect_files(paths, recursive=recursive)
    except (FileNotFoundError, OSError) as exc:
        raise CLIError(str(exc)) from exc
    if not files:
        raise CLIError("no files to upload")

    display = BatchUploadProgressDisplay(live=live)
    try:
        async with UploadOrchestrator(api_url, config=config) as orchestrator:
            display.attach(orchestrator)
            await orchestrator.select(files)
            results = await orchestrator.wait()
            entries = orchestrator.entries
    finally:
        display.on_finish()

    if entries:
        render_entries(entries)

    stats = display.stats
    if stats["rejected"] or any(not r.success for r in results):
        return 1
    return 0


async def _run_delete(api_url: str, keys: List[str], config: UploadConfig) -> int:
    from .orchestrator import UploadOrchestrator

    failed = 0
    async with UploadOrchestrator(api_url, config=config) as orchestrator:
        for key in keys:
            result = await orchestrator.delete_key(key)
            render_delete_result(result)
            if not result.success:
                failed += 1
    return 1 if failed else 0


def _run_serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run(
        "s3drop.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        log_config=None,
    )
    return 0


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3drop",
        description="Upload images directly to object storage through presigned URLs.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"s3drop {__version__}",
    )
    sub = parser.add_subparsers(dest="command")

    upload = sub.add_parser("upload", help="Upload image files (max 5 per batch)")
    upload.add_argument("paths", nargs="+", type=Path, help="Files or folders to upload")
    upload.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        help="Descend into sub-folders",
    )
    upload.add_argument(
        "--api-url",
        default=None,
        help=f"API base URL (default from S3DROP_API_URL or {DEFAULT_API_URL})",
    )
    upload.add_argument(
        "--no-live",
        action="store_true",
        help="Disable live progress bars",
    )
    _add_common_options(upload)

    delete = sub.add_parser("delete", help="Delete uploaded objects by key")
    delete.add_argument("keys", nargs="+", help="Object keys")
    delete.add_argument(
        "--api-url",
        default=None,
        help=f"API base URL (default from S3DROP_API_URL or {DEFAULT_API_URL})",
    )
    _add_common_options(delete)

    serve = sub.add_parser("serve", help="Run the presign/delete API")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")
    _add_common_options(serve)

    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    used_env_file = args.env_file
    if used_env_file is None and Path(".env").is_file():
        used_env_file = Path(".env")
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    config = UploadConfig()

    try:
        if args.command == "serve":
            settings = _server_settings()
            render_configuration_summary(
                {
                    "Command": "serve",
                    "Listen": f"{args.host}:{args.port}",
                    "Bucket": settings.bucket,
                    "Endpoint": settings.endpoint_url or "(aws default)",
                    "Presign TTL": f"{settings.presign_expiration}s",
                    "Env File": str(used_env_file) if used_env_file else "-",
                    "Logging": effective_log_mode,
                }
            )
            return _run_serve(args.host, args.port)

        api_url = _resolve_api_url(args.api_url)

        if args.command == "upload":
            render_configuration_summary(
                {
                    "Command": "upload",
                    "Sources": ", ".join(str(p) for p in args.paths),
                    "API": api_url,
                    "Max Files": config.max_files,
                    "Max Size": config.max_file_size_label,
                    "Accept": ", ".join(config.accept),
                    "Env File": str(used_env_file) if used_env_file else "-",
                    "Logging": effective_log_mode,
                }
            )
            paths = [Path(p).expanduser() for p in args.paths]
            return asyncio.run(
                _run_upload(api_url, paths, args.recursive, config, live=not args.no_live)
            )

        return asyncio.run(_run_delete(api_url, list(args.keys), config))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
