import tempfile
import unittest
from datetime import timedelta
from pathlib import Path

from tickwork.config_loader import _parse_duration, load_config, parse_config

SAMPLE_CONFIG = """
log_level: debug
scheduler:
  shutdown_timeout: 2s
jobs:
  - name: disk-usage
    interval: 1m
    command: df -h /
    permanent_exit_codes: [127]
  - name: health
    interval: 500ms
    url: http://127.0.0.1:8080/healthz
    method: head
    timeout: 3s
    permanent_statuses: [404, 410]
"""


class LoadConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "tickwork.yaml"

    def test_loads_sample_file(self):
        self.path.write_text(SAMPLE_CONFIG, encoding="utf-8")
        config = load_config(self.path)

        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.scheduler.shutdown_timeout, timedelta(seconds=2))
        self.assertEqual(len(config.jobs), 2)

        disk, health = config.jobs
        self.assertEqual(disk.name, "disk-usage")
        self.assertEqual(disk.interval, timedelta(minutes=1))
        self.assertEqual(disk.command, ("df", "-h", "/"))
        self.assertIsNone(disk.url)
        self.assertEqual(disk.permanent_exit_codes, (127,))

        self.assertEqual(health.interval, timedelta(milliseconds=500))
        self.assertEqual(health.url, "http://127.0.0.1:8080/healthz")
        self.assertEqual(health.method, "HEAD")
        self.assertEqual(health.timeout, 3.0)
        self.assertEqual(health.permanent_statuses, (404, 410))

    def test_root_must_be_mapping(self):
        self.path.write_text("- a\n- b\n", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_config(self.path)

    def test_defaults_when_sections_missing(self):
        config = parse_config({})
        self.assertEqual(config.jobs, ())
        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.scheduler.shutdown_timeout, timedelta(seconds=5))

    def test_job_validation(self):
        invalid = {
            "missing interval": {"command": "true"},
            "no kind": {"interval": "1s"},
            "both kinds": {"interval": "1s", "command": "true", "url": "http://x"},
            "zero interval": {"interval": 0, "command": "true"},
            "empty command": {"interval": "1s", "command": []},
            "not a mapping": "true",
            "exit codes not a list": {"interval": "1s", "command": "true", "permanent_exit_codes": 1},
            "statuses not a list": {"interval": "1s", "url": "http://x", "permanent_statuses": 1},
            "statuses not integers": {"interval": "1s", "url": "http://x", "permanent_statuses": ["gone"]},
            "interval beyond thread timeout": {"interval": "1e10s", "command": "true"},
        }
        for label, job in invalid.items():
            with self.subTest(label):
                with self.assertRaises(ValueError):
                    parse_config({"jobs": [job]})

    def test_scheduler_section_must_be_mapping(self):
        with self.assertRaises(ValueError):
            parse_config({"scheduler": 5})

    def test_malformed_yaml_is_a_value_error(self):
        self.path.write_text("jobs: [\n  - {name: a\n", encoding="utf-8")
        with self.assertRaises(ValueError) as ctx:
            load_config(self.path)
        self.assertIn("invalid YAML", str(ctx.exception))

    def test_duplicate_names_rejected(self):
        job = {"name": "same", "interval": "1s", "command": "true"}
        with self.assertRaises(ValueError):
            parse_config({"jobs": [job, dict(job)]})

    def test_unknown_log_level_rejected(self):
        with self.assertRaises(ValueError):
            parse_config({"log_level": "chatty"})


class ParseDurationTests(unittest.TestCase):
    def test_accepted_values(self):
        cases = {
            "30s": timedelta(seconds=30),
            "5m": timedelta(minutes=5),
            "1.5h": timedelta(minutes=90),
            "1d": timedelta(days=1),
            "250ms": timedelta(milliseconds=250),
            "42": timedelta(seconds=42),
            7: timedelta(seconds=7),
            0.5: timedelta(milliseconds=500),
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(_parse_duration(raw), expected)

    def test_rejected_values(self):
        for raw in ("10y", "abcs", "", "1e400s", "9" * 400, None, True, [1]):
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    _parse_duration(raw)


if __name__ == "__main__":
    unittest.main()
