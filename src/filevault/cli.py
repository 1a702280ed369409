"""FileVault CLI - operator commands with deterministic JSON output.

Usage:
    filevault [--root PATH] serve [--host HOST] [--port PORT]
    filevault [--root PATH] list-versions PATH
    filevault [--root PATH] rollback PATH --version N
    filevault [--root PATH] audit [--date YYYY-MM-DD] [--path PATH]

Exit codes:
    0: Success
    1: Internal error (storage backend failure)
    2: Request error (bad path, no versions, invalid version, bad arguments)
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from filevault.audit.query import AuditLogReader
from filevault.config import VaultConfig
from filevault.logging_config import configure_logging
from filevault.storage.errors import FileVaultError, StorageBackendError
from filevault.storage.vault import FileVault

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


def _output_json(data: Any) -> None:
    """Output JSON to stdout with deterministic ordering."""
    print(json.dumps(data, sort_keys=True, indent=2))


def _error_result(exc: FileVaultError) -> dict[str, Any]:
    return {"code": exc.code, "message": exc.message}


def _exit_code_for(exc: FileVaultError) -> int:
    return 1 if isinstance(exc, StorageBackendError) else 2


def _load_config(args: argparse.Namespace) -> VaultConfig:
    config = VaultConfig.from_env()
    if args.root:
        config = dataclasses.replace(config, root=Path(args.root))
    return config


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from filevault.api.main import create_app

    config = _load_config(args)
    configure_logging(config.log_level)
    uvicorn.run(
        create_app(config),
        host=args.host,
        port=args.port,
        log_level=config.log_level.lower(),
    )
    return 0


def cmd_list_versions(args: argparse.Namespace) -> int:
    """Print the archived snapshots of a path keyed by ordinal."""
    vault = FileVault(_load_config(args))
    try:
        snapshots = vault.list_versions(args.path)
    except FileVaultError as e:
        _output_json(_error_result(e))
        return _exit_code_for(e)

    _output_json({str(s.ordinal): s.to_dict() for s in snapshots})
    return 0


def cmd_rollback(args: argparse.Namespace) -> int:
    """Restore a snapshot of a path as its active content."""
    vault = FileVault(_load_config(args))
    try:
        logical_path = vault.resolve(args.path)
        snapshot = vault.rollback(args.path, {"version": args.version})
    except FileVaultError as e:
        _output_json(_error_result(e))
        return _exit_code_for(e)

    _output_json({"status": "success", "path": logical_path, "version": snapshot.ordinal})
    return 0


def cmd_audit(args: argparse.Namespace) -> int:
    """Print the audit records of one UTC day, optionally for one path."""
    config = _load_config(args)

    if args.date:
        try:
            day = date.fromisoformat(args.date)
        except ValueError:
            _output_json({"code": "InvalidRequest", "message": f"Invalid date: {args.date}"})
            return 2
    else:
        day = datetime.now(UTC).date()

    reader = AuditLogReader(config.audit_root)
    if args.path:
        try:
            logical_path = FileVault(config).resolve(args.path)
        except FileVaultError as e:
            _output_json(_error_result(e))
            return _exit_code_for(e)
        records = reader.records_for_path(logical_path, day)
    else:
        records = reader.read_day(day)

    _output_json({"date": day.isoformat(), "records": [r.to_dict() for r in records]})
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="filevault",
        description="FileVault - sandboxed, versioned file storage",
    )
    parser.add_argument(
        "--root",
        metavar="PATH",
        default=None,
        help="Storage root (overrides FILEVAULT_ROOT)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=DEFAULT_HOST, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Bind port")

    list_parser = subparsers.add_parser(
        "list-versions",
        help="List archived snapshots of a path",
    )
    list_parser.add_argument("path", help="Logical path")

    rollback_parser = subparsers.add_parser(
        "rollback",
        help="Restore an archived snapshot of a path",
    )
    rollback_parser.add_argument("path", help="Logical path")
    rollback_parser.add_argument(
        "--version",
        required=True,
        type=int,
        help="1-based snapshot ordinal, oldest first",
    )

    audit_parser = subparsers.add_parser("audit", help="Show audit records")
    audit_parser.add_argument(
        "--date",
        default=None,
        metavar="YYYY-MM-DD",
        help="UTC day to read (default: today)",
    )
    audit_parser.add_argument(
        "--path",
        default=None,
        help="Only show records for this logical path",
    )

    return parser


COMMAND_DISPATCH = {
    "serve": cmd_serve,
    "list-versions": cmd_list_versions,
    "rollback": cmd_rollback,
    "audit": cmd_audit,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    handler = COMMAND_DISPATCH.get(args.command)
    if handler is None:
        parser.print_help()
        return 2

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
