"""Utilities to load :mod:`tickwork.config` structures from YAML files."""
from __future__ import annotations

import datetime as _dt
import shlex
import threading
from pathlib import Path
from typing import Any, Mapping, Tuple

import yaml

from .config import LOG_LEVELS, JobSpec, SchedulerConfig, TickworkConfig

_DURATION_UNITS = {
    "ms": _dt.timedelta(milliseconds=1),
    "s": _dt.timedelta(seconds=1),
    "m": _dt.timedelta(minutes=1),
    "h": _dt.timedelta(hours=1),
    "d": _dt.timedelta(days=1),
}


def load_config(path: Path) -> TickworkConfig:
    """Load a configuration file into :class:`TickworkConfig`.

    The loader accepts human friendly values such as ``"30s"`` or ``"5m"`` for
    durations and converts them into :class:`datetime.timedelta` objects.  Fields
    omitted in the YAML file fall back to the defaults declared in
    :mod:`tickwork.config`.
    """

    return parse_config(_load_yaml(path))


def parse_config(raw: Mapping[str, Any]) -> TickworkConfig:
    scheduler_section = raw.get("scheduler") or {}
    if not isinstance(scheduler_section, Mapping):
        raise ValueError("'scheduler' must be a mapping")
    scheduler = SchedulerConfig(
        shutdown_timeout=_parse_duration(scheduler_section.get("shutdown_timeout", "5s")),
    )

    jobs_section = raw.get("jobs") or []
    if not isinstance(jobs_section, list):
        raise ValueError("'jobs' must be a list")
    jobs = [_parse_job(index, item) for index, item in enumerate(jobs_section)]

    names = [job.name for job in jobs]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"duplicate job names: {', '.join(duplicates)}")

    log_level = str(raw.get("log_level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"unknown log level: {log_level}")

    return TickworkConfig(
        jobs=tuple(jobs),
        scheduler=scheduler,
        log_level=log_level,
    )


def _parse_job(index: int, item: Any) -> JobSpec:
    if not isinstance(item, Mapping):
        raise ValueError(f"job #{index} must be a mapping")
    if "interval" not in item:
        raise ValueError(f"job #{index} is missing 'interval'")

    command = item.get("command")
    if isinstance(command, str):
        command = shlex.split(command)
    if command is not None and (not isinstance(command, list) or not command):
        raise ValueError(f"job #{index} 'command' must be a non-empty string or list")
    url = item.get("url")
    if (command is None) == (url is None):
        raise ValueError(f"job #{index} must define exactly one of 'command' or 'url'")

    interval = _parse_duration(item["interval"])
    if interval <= _dt.timedelta(0):
        raise ValueError(f"job #{index} interval must be positive")
    if interval.total_seconds() > threading.TIMEOUT_MAX:
        raise ValueError(f"job #{index} interval is too large")

    return JobSpec(
        name=str(item.get("name", f"job-{index}")),
        interval=interval,
        command=tuple(str(part) for part in command) if command is not None else None,
        url=str(url) if url is not None else None,
        method=str(item.get("method", "GET")).upper(),
        timeout=_parse_duration(item.get("timeout", 10)).total_seconds(),
        permanent_exit_codes=_parse_codes(index, item, "permanent_exit_codes"),
        permanent_statuses=_parse_codes(index, item, "permanent_statuses"),
    )


def _parse_codes(index: int, item: Mapping[str, Any], key: str) -> Tuple[int, ...]:
    codes = item.get(key, [])
    if not isinstance(codes, list):
        raise ValueError(f"job #{index} '{key}' must be a list")
    try:
        return tuple(int(code) for code in codes)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"job #{index} '{key}' must contain integers") from exc


def _load_yaml(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ValueError("configuration root must be a mapping")
    return data


def _parse_duration(value: Any) -> _dt.timedelta:
    if isinstance(value, _dt.timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"unsupported duration value: {value!r}")
    if isinstance(value, (int, float)):
        return _seconds(value, value)
    if not isinstance(value, str):
        raise ValueError(f"unsupported duration value: {value!r}")
    value = value.strip()
    if value.isdigit():
        return _seconds(int(value), value)
    unit = "ms" if value.lower().endswith("ms") else value[-1:].lower()
    if unit not in _DURATION_UNITS:
        raise ValueError(f"unknown duration unit: {value}")
    try:
        amount = float(value[: -len(unit)])
    except ValueError as exc:
        raise ValueError(f"invalid duration: {value}") from exc
    base = _DURATION_UNITS[unit]
    return _seconds(base.total_seconds() * amount, value)


def _seconds(amount: Any, raw: Any) -> _dt.timedelta:
    try:
        return _dt.timedelta(seconds=float(amount))
    except (OverflowError, ValueError) as exc:
        raise ValueError(f"invalid duration: {raw!r}") from exc
