"""
Command-line interface for the buildconnector package.

Runs the build tool for one directory or for projects from the
configuration file and reports the job events through the log.
"""

import argparse
import dataclasses
import logging
import sys
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import get_config, set_config_path, validate_connector_config
from ..connector import BuildToolConnector
from ..events import FailureEvent, LoggingEventSink
from ..models.config import ConnectorConfig
from ..models.job import EventKind
from ..validation import (
    ValidationError,
    handle_cli_error,
    validate_directory,
    validate_project_name,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


class _FailureCountingSink(LoggingEventSink):
    """Logging sink that remembers how many jobs failed."""

    def __init__(self, include_output: bool = False):
        super().__init__(include_output=include_output)
        self.failures = 0
        self._lock = threading.Lock()

    def raise_failure(self, event: FailureEvent) -> None:
        with self._lock:
            self.failures += 1
        super().raise_failure(event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildconnector",
        description="Run a build tool against project directories and report job events.",
    )
    parser.add_argument("--config", type=Path, help="Path to config.toml.")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("-p", "--project", type=str,
                        help="Run a single project from the configuration.")
    target.add_argument("-d", "--dir", type=Path,
                        help="Run in this directory instead of configured projects.")
    parser.add_argument("-k", "--kind", choices=[k.value for k in EventKind],
                        help="Event kind for --dir runs, or override for projects.")
    parser.add_argument("-c", "--command", type=str,
                        help="Command template, e.g. 'clean compile'.")
    parser.add_argument("-e", "--executable", type=str,
                        help="Build tool executable or name to resolve on PATH.")
    parser.add_argument("--process-id", type=int,
                        help="Numeric id for the job events instead of a generated one.")
    parser.add_argument("--sync", action="store_true",
                        help="Run jobs on the calling thread.")
    parser.add_argument("--no-log-file", action="store_true",
                        help="Do not copy output into rotating log files.")
    parser.add_argument("--show-output", action="store_true",
                        help="Log the captured build output of each job.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _load_connector_config(args: argparse.Namespace) -> Tuple[ConnectorConfig, list]:
    """Return the connector settings and configured projects for this run."""
    if args.config is not None:
        set_config_path(args.config)

    if args.dir is not None and args.config is None:
        # Ad-hoc run: no configuration file needed.
        raw = {"command": args.command or ""}
        if args.executable:
            raw["executable"] = args.executable
        return validate_connector_config(raw, base_dir=Path.cwd()), []

    app_config = get_config()
    return app_config.connector, app_config.projects


def _select_targets(args: argparse.Namespace, projects: list) -> List[Tuple[Path, EventKind, Optional[str]]]:
    kind_override = EventKind(args.kind) if args.kind else None

    if args.dir is not None:
        directory = validate_directory(args.dir, field_name="--dir argument")
        return [(directory, kind_override or EventKind.BUILD, args.command)]

    if args.project:
        name = validate_project_name(args.project, field_name="--project argument")
        selected = [p for p in projects if p.name == name]
        if not selected:
            available = ", ".join(p.name for p in projects)
            raise ValidationError(
                f"Project '{name}' not found in configuration. Available: {available}",
                field_name="--project argument",
                value=name,
            )
    else:
        selected = projects

    return [
        (p.dir, kind_override or p.kind, args.command or p.command)
        for p in selected
    ]


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Exits with status 1 if configuration is invalid or any job failed.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    try:
        connector_config, projects = _load_connector_config(args)
        targets = _select_targets(args, projects)
    except (FileNotFoundError, KeyError, ValidationError) as e:
        handle_cli_error(error=e, context="configuration", exit_code=1, logger=logger)
        return

    overrides = {}
    if args.sync:
        overrides["synchronous"] = True
    if args.no_log_file:
        overrides["use_log_file"] = False
    if args.executable:
        overrides["executable"] = args.executable
    if overrides:
        connector_config = dataclasses.replace(connector_config, **overrides)

    if not targets:
        logger.warning("No projects to run")
        return

    if connector_config.use_log_file:
        connector_config.log_dir.mkdir(parents=True, exist_ok=True)

    sink = _FailureCountingSink(include_output=args.show_output)
    with BuildToolConnector(connector_config, sink) as connector:
        for directory, kind, command in targets:
            job = {
                EventKind.BUILD: connector.build,
                EventKind.TEST: connector.run_tests,
                EventKind.DEPLOY: connector.deploy,
            }[kind]
            job_id = job(directory, process_id=args.process_id, command=command)
            logger.info(f"Submitted {kind.value} job {job_id} for {directory}")

    if sink.failures:
        logger.error(f"{sink.failures} of {len(targets)} jobs failed")
        sys.exit(1)
    logger.info(f"All {len(targets)} jobs succeeded")


if __name__ == "__main__":
    main_cli()
