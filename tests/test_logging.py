import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from redundancy.engine import compute_redundancy
from redundancy.logging_utils import (
    LOGGER_NAME,
    PIPELINE_STAGES,
    LogSettings,
    get_run_logger,
    setup_logging,
)
from redundancy.models import Page

LOREM = (
    "concepts alignment safety interpretability oversight scalable constitutional training "
    "robustness corrigible deceptive scheming inner mesa policy reward specification prosaic"
)


def _reset_logger():
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def _rows(path: Path) -> list[dict]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines if line.strip()]


class TestLogSettings(unittest.TestCase):
    def test_env_values_are_read(self):
        with patch.dict(
            "os.environ",
            {
                "REDUNDANCY_LOG_PATH": "/tmp/x/redundancy.log",
                "REDUNDANCY_LOG_LEVEL": "debug",
                "REDUNDANCY_LOG_MAX_BYTES": "100",
                "REDUNDANCY_LOG_BACKUP_COUNT": "2",
            },
            clear=False,
        ):
            settings = LogSettings.from_env()
        self.assertEqual(settings.path, Path("/tmp/x/redundancy.log"))
        self.assertEqual(settings.level, logging.DEBUG)
        self.assertEqual((settings.max_bytes, settings.backup_count), (100, 2))

    def test_unknown_level_falls_back_to_info(self):
        with patch.dict("os.environ", {"REDUNDANCY_LOG_LEVEL": "chatty"}, clear=False):
            self.assertEqual(LogSettings.from_env().level, logging.INFO)


class TestRunLogger(unittest.TestCase):
    def tearDown(self):
        _reset_logger()

    def test_timed_stage_is_recorded_in_summary(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "redundancy.log"
            setup_logging(LogSettings(path=log_path), force=True)
            run = get_run_logger("run123")
            with run.timed("clustering", "Grouped pages by content format") as counters:
                counters["cluster_count"] = 3
            summary = run.summary(pair_count=4)

            row = _rows(log_path)[-1]
            self.assertEqual(row["run_id"], "run123")
            self.assertEqual(row["stage"], "clustering")
            self.assertEqual(row["cluster_count"], 3)
            self.assertGreaterEqual(row["elapsed_ms"], 0)
            self.assertEqual(summary["pair_count"], 4)
            self.assertEqual(list(summary["stage_ms"]), ["clustering"])
            self.assertEqual(summary["total_ms"], summary["stage_ms"]["clustering"])
            _reset_logger()

    def test_set_fields_are_written_as_sorted_lists(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "redundancy.log"
            setup_logging(LogSettings(path=log_path), force=True)
            get_run_logger("r").event("eligibility", "Skipped pages", skipped=frozenset({"b", "a"}))

            self.assertEqual(_rows(log_path)[-1]["skipped"], ["a", "b"])
            _reset_logger()

    def test_debug_events_respect_level(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "redundancy.log"
            setup_logging(LogSettings(path=log_path, level=logging.INFO), force=True)
            run = get_run_logger("r")
            run.event("cluster_compared", "Compared format cluster", level=logging.DEBUG)
            run.event("pairwise", "Compared pages within format clusters")

            self.assertEqual([r["stage"] for r in _rows(log_path)], ["pairwise"])
            _reset_logger()


class TestEngineLogging(unittest.TestCase):
    def tearDown(self):
        _reset_logger()

    def test_engine_emits_each_stage_with_counts(self):
        with tempfile.TemporaryDirectory() as tmp, patch.dict(
            "os.environ",
            {
                "REDUNDANCY_LOG_PATH": str(Path(tmp) / "redundancy.log"),
                "REDUNDANCY_LOG_LEVEL": "INFO",
            },
            clear=False,
        ):
            setup_logging(force=True)
            text = " ".join([LOREM] * 5)
            pages = [
                Page(id="a", raw_content=text, content_format="article"),
                Page(id="b", raw_content=text, content_format="article"),
                Page(id="thin", raw_content="too short", content_format="article"),
            ]
            result = compute_redundancy(pages, find_paragraphs=True)

            run_rows = [r for r in _rows(Path(tmp) / "redundancy.log") if r.get("run_id") == result.run_id]
            self.assertEqual([r["stage"] for r in run_rows], list(PIPELINE_STAGES))
            by_stage = {r["stage"]: r for r in run_rows}
            self.assertEqual(by_stage["redundancy_start"]["page_count"], 3)
            self.assertEqual(by_stage["eligibility"]["eligible_count"], 2)
            self.assertEqual(by_stage["eligibility"]["skipped_count"], 1)
            self.assertEqual(by_stage["clustering"]["cluster_count"], 1)
            self.assertEqual(by_stage["pairwise"]["comparison_count"], 1)

            finish = by_stage["redundancy_finish"]
            self.assertEqual(finish["pair_count"], 1)
            self.assertEqual(finish["eligible_count"], 2)
            self.assertEqual(
                set(finish["stage_ms"]),
                {"eligibility", "clustering", "pairwise", "aggregation", "paragraphs"},
            )
            _reset_logger()

    def test_duplicate_id_is_logged_as_warning(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "redundancy.log"
            setup_logging(LogSettings(path=log_path), force=True)
            text = " ".join([LOREM] * 5)
            compute_redundancy([Page(id="a", raw_content=text), Page(id="a", raw_content=text)])

            warnings = [r for r in _rows(log_path) if r["level"] == "WARNING"]
            self.assertEqual(len(warnings), 1)
            self.assertEqual(warnings[0]["page_id"], "a")
            _reset_logger()


if __name__ == "__main__":
    unittest.main()
