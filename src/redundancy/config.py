from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from redundancy.constants import (
    DEFAULT_TEMPLATE_PHRASES,
    MIN_DISTINCT_WORDS,
    MIN_WORD_LENGTH,
    SHINGLE_SIZE,
    SIMILARITY_THRESHOLD,
    TOP_SIMILAR_PAGES,
    WORD_SIMILARITY_THRESHOLD,
)
from redundancy.models import Page

try:
    import yaml
except ImportError as exc:  # pragma: no cover
    raise RuntimeError("PyYAML is required. Install with: pip install PyYAML") from exc

ENV_PREFIX = "REDUNDANCY_"


@dataclass(slots=True)
class EngineSettings:
    shingle_size: int = SHINGLE_SIZE
    min_word_length: int = MIN_WORD_LENGTH
    min_distinct_words: int = MIN_DISTINCT_WORDS
    similarity_threshold: float = SIMILARITY_THRESHOLD
    word_similarity_threshold: float = WORD_SIMILARITY_THRESHOLD
    top_similar_pages: int = TOP_SIMILAR_PAGES
    strip_template_phrases: bool = False
    template_phrases: list[str] = field(default_factory=lambda: list(DEFAULT_TEMPLATE_PHRASES))
    workers: int = 1


def _read_yaml(path: str | Path) -> dict:
    p = Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML object at {path}")
    return data


def load_dotenv(path: str | Path = ".env", *, prefix: str = ENV_PREFIX) -> list[str]:
    """Export ``REDUNDANCY_*`` entries from a dotenv file.

    Variables already set in the environment win. Returns the keys applied.
    """
    env_path = Path(path)
    if not env_path.exists():
        return []
    applied: list[str] = []
    for line in env_path.read_text(encoding="utf-8").splitlines():
        entry = line.strip().removeprefix("export ").strip()
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key.startswith(prefix) or key in os.environ:
            continue
        os.environ[key] = value.strip().strip("\"'")
        applied.append(key)
    return applied


def load_settings(path: str | Path) -> EngineSettings:
    return parse_settings_dict(_read_yaml(path))


def load_effective_settings(base_path: str | Path, overlay_path: str | Path | None = None) -> EngineSettings:
    merged = _read_yaml(base_path)
    if overlay_path:
        merged.update(_read_yaml(overlay_path))
    return parse_settings_dict(merged)


def parse_settings_dict(data: dict) -> EngineSettings:
    if not isinstance(data, dict):
        raise ValueError("settings payload must be an object")
    similarity_threshold = _as_fraction(data, "similarity_threshold", SIMILARITY_THRESHOLD)
    word_similarity_threshold = _as_fraction(data, "word_similarity_threshold", WORD_SIMILARITY_THRESHOLD)
    env_workers = os.getenv("REDUNDANCY_WORKERS", "").strip()
    workers = data.get("workers", env_workers or 1)
    phrases = DEFAULT_TEMPLATE_PHRASES
    if data.get("template_phrases") is not None:
        phrases = _as_str_list(data, "template_phrases")
    return EngineSettings(
        shingle_size=_as_positive_int(data, "shingle_size", SHINGLE_SIZE),
        min_word_length=_as_positive_int(data, "min_word_length", MIN_WORD_LENGTH),
        min_distinct_words=max(0, int(data.get("min_distinct_words", MIN_DISTINCT_WORDS) or 0)),
        similarity_threshold=similarity_threshold,
        word_similarity_threshold=word_similarity_threshold,
        top_similar_pages=_as_positive_int(data, "top_similar_pages", TOP_SIMILAR_PAGES),
        strip_template_phrases=_as_bool(data, "strip_template_phrases", False),
        template_phrases=[p.lower() for p in phrases],
        workers=max(1, int(workers or 1)),
    )


def load_pages(path: str | Path) -> list[Page]:
    """Read page records from a YAML or JSON file.

    Accepts a bare list or a mapping with a ``pages`` list. Ids must be
    present and unique; everything else is left to the engine's defaults.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if isinstance(data, dict):
        data = data.get("pages")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of pages in {path}")

    pages: list[Page] = []
    seen: set[str] = set()
    for idx, row in enumerate(data):
        if not isinstance(row, dict):
            raise ValueError(f"Expected object at 'pages[{idx}]'")
        page = Page.from_dict(row)
        if not page.id.strip():
            raise ValueError(f"Missing id at 'pages[{idx}]'")
        if page.id in seen:
            raise ValueError(f"Duplicate page id '{page.id}' at 'pages[{idx}]'")
        seen.add(page.id)
        pages.append(page)
    return pages


def _as_fraction(data: dict, key: str, default: float) -> float:
    raw = data.get(key, default)
    value = float(default if raw is None else raw)
    if not (0 <= value <= 1):
        raise ValueError(f"{key} must be between 0 and 1")
    return value


def _as_bool(data: dict, key: str, default: bool) -> bool:
    raw = data.get(key, default)
    if raw is None:
        return default
    if not isinstance(raw, bool):
        raise ValueError(f"{key} must be true or false")
    return raw


def _as_positive_int(data: dict, key: str, default: int) -> int:
    raw = data.get(key, default)
    value = int(default if raw is None else raw)
    if value < 1:
        raise ValueError(f"{key} must be >= 1")
    return value


def _as_str_list(data: dict, key: str) -> list[str]:
    raw = data.get(key, [])
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Expected list for '{key}'")
    values = []
    for idx, value in enumerate(raw):
        if not isinstance(value, str):
            raise ValueError(f"Expected string at '{key}[{idx}]'")
        stripped = value.strip()
        if stripped:
            values.append(stripped)
    return values
