from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from csvsync.app import import_source, list_sources, register_source, run_file
from csvsync.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile CSV snapshots with stored records")
    subparsers = parser.add_subparsers(dest="command", required=True)

    source = subparsers.add_parser("source", help="Import source management commands")
    source_sub = source.add_subparsers(dest="source_command", required=True)
    source_add = source_sub.add_parser(
        "add",
        help="Register an import source, or update the given settings of an existing one",
    )
    source_add.add_argument("name", help="Unique source name")
    source_add.add_argument(
        "--selector",
        required=True,
        help="Local path, http(s) URL, or remote path when --server is given",
    )
    source_add.add_argument(
        "--options",
        help="Source options as key=value lines, e.g. 'type=workitem\\nkey=id'",
    )
    source_add.add_argument(
        "--options-file",
        type=Path,
        help="Read the source options from a properties file",
    )
    source_add.add_argument("--server", help="FTP server host")
    source_add.add_argument("--port", type=int, help="FTP server port")
    source_add.add_argument("--user", help="User for HTTP basic auth or FTP login")
    source_add.add_argument("--password", help="Password for HTTP basic auth or FTP login")
    _add_scope_arguments(source_add)
    source_sub.add_parser("list", help="List registered import sources")

    run = subparsers.add_parser("import", help="Import one registered source")
    run.add_argument("name", help="Name of the source to import")
    run.add_argument(
        "--force",
        action="store_true",
        help="Clear the stored checksum so an unchanged file is processed again",
    )

    run_path = subparsers.add_parser("run-file", help="Import a local file directly")
    run_path.add_argument("path", type=Path, help="Path of the delimited file")
    run_path.add_argument("--type", dest="record_type", default="workitem", help="Record type")
    run_path.add_argument("--key", required=True, help="Name of the key column")
    run_path.add_argument("--delimiter", help="Field delimiter (default ';', 'tab' for tabs)")
    run_path.add_argument("--encoding", help="File encoding (default UTF-8)")
    run_path.add_argument(
        "--force",
        action="store_true",
        help="Process the file even if it did not change since the last run",
    )
    _add_scope_arguments(run_path)

    return parser.parse_args(list(argv))


def _add_scope_arguments(parser: argparse.ArgumentParser) -> None:
    scope = parser.add_mutually_exclusive_group()
    scope.add_argument("--group", dest="workflow_group", help="Workflow group owning records")
    scope.add_argument("--version", dest="model_version", help="Model version owning records")
    parser.add_argument("--task-id", type=int, help="Task assigned to created records")
    parser.add_argument("--event-id", type=int, help="Workflow event processed per record")


def _read_options(args: argparse.Namespace) -> str | None:
    if args.options_file is None:
        return args.options.replace("\\n", "\n") if args.options else None
    if args.options:
        raise ValueError("Use either --options or --options-file, not both")
    try:
        return args.options_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read options file: {exc}") from exc


def _print_sources() -> None:
    for source in list_sources():
        last_run = source.last_run_at.isoformat() if source.last_run_at else "never"
        print(f"{source.name}\t{source.selector}\t{last_run}\t{source.last_log or ''}")  # noqa: T201


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    options: str | None = None
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "source" and parsed_args.source_command == "add":
            options = _read_options(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "source" and parsed_args.source_command == "add":
            source = register_source(
                name=parsed_args.name,
                selector=parsed_args.selector,
                options=options,
                server=parsed_args.server,
                port=parsed_args.port,
                user=parsed_args.user,
                password=parsed_args.password,
                model_version=parsed_args.model_version,
                workflow_group=parsed_args.workflow_group,
                task_id=parsed_args.task_id,
                event_id=parsed_args.event_id,
            )
            log.info("Source %s saved (%s)", source.name, source.id)
        elif parsed_args.command == "source" and parsed_args.source_command == "list":
            _print_sources()
        elif parsed_args.command == "import":
            summary = import_source(parsed_args.name, force=parsed_args.force)
            log.info("%s: %s", parsed_args.name, summary)
        elif parsed_args.command == "run-file":
            summary = run_file(
                parsed_args.path,
                record_type=parsed_args.record_type,
                key=parsed_args.key,
                workflow_group=parsed_args.workflow_group,
                model_version=parsed_args.model_version,
                task_id=parsed_args.task_id,
                event_id=parsed_args.event_id,
                delimiter=parsed_args.delimiter,
                encoding=parsed_args.encoding,
                force=parsed_args.force,
            )
            log.info("%s: %s", parsed_args.path, summary)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point: load ``.env`` and install the SIGINT handler."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
