"""Command line entry point for running configured periodic jobs."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from .config import LOG_LEVELS, TickworkConfig
from .config_loader import load_config
from .logging_config import setup_logging
from .services import CancellationScope, JobID, Scheduler
from .tasks import build_task

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="tickwork periodic job runner")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser(
        "check-config",
        help="Validate a configuration file and print the parsed jobs",
    )
    check.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the YAML configuration file",
    )

    run = sub.add_parser(
        "run",
        help="Run the configured jobs until interrupted",
    )
    run.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to the YAML configuration file",
    )
    run.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )
    run.add_argument(
        "--log-level",
        default=None,
        choices=LOG_LEVELS,
        type=str.upper,
        help="Override the log level from the configuration file",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"invalid configuration: {exc}", file=sys.stderr)
        return 2

    if args.command == "check-config":
        return _command_check_config(config)
    if args.command == "run":
        return _command_run(config, args.duration, args.log_level)

    parser.error("unknown command")
    return 1


def _command_check_config(config: TickworkConfig) -> int:
    output = {
        "log_level": config.log_level,
        "shutdown_timeout": config.scheduler.shutdown_timeout.total_seconds(),
        "jobs": [
            {
                "name": job.name,
                "interval": job.interval.total_seconds(),
                "command": list(job.command) if job.command is not None else None,
                "url": job.url,
                "method": job.method,
                "timeout": job.timeout,
                "permanent_exit_codes": list(job.permanent_exit_codes),
                "permanent_statuses": list(job.permanent_statuses),
            }
            for job in config.jobs
        ],
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


def _command_run(config: TickworkConfig, duration: Optional[float], log_level: Optional[str]) -> int:
    setup_logging(log_level or config.log_level)
    if not config.jobs:
        logger.warning("no jobs configured, nothing to do")
        return 0

    root = CancellationScope()
    scheduled = []
    with Scheduler(parent=root, config=config.scheduler) as scheduler:
        for spec in config.jobs:
            task = build_task(spec)
            job_id = scheduler.start_job_every(spec.interval, task, name=spec.name)
            scheduled.append((job_id, task))
            logger.info(
                "scheduled %s every %ss as job %s",
                spec.name,
                spec.interval.total_seconds(),
                job_id,
            )
        try:
            root.wait(duration)
        except KeyboardInterrupt:  # pragma: no cover - interactive use
            print("Interrupted, stopping jobs...", file=sys.stderr)
        finally:
            root.cancel()

    _close_tasks(scheduler, scheduled)
    return 0


def _close_tasks(scheduler: Scheduler, scheduled: Sequence[Tuple[JobID, Callable[[], object]]]) -> None:
    for job_id, task in scheduled:
        close = getattr(task, "close", None)
        if close is None:
            continue
        if scheduler.job_state(job_id) is not None:
            logger.warning("job %s is still running, leaving its task open", job_id)
            continue
        close()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
