from __future__ import annotations

import re
from typing import Iterable

FRONTMATTER_RE = re.compile(r"^---.*?---", re.MULTILINE | re.DOTALL)
IMPORT_LINE_RE = re.compile(r"^import\s+.*$", re.MULTILINE)
CODE_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)
TAG_RE = re.compile(r"<[^>]+>")
TABLE_ROW_RE = re.compile(r"\|[^\n]+\|")
HEADING_RE = re.compile(r"#+\s+")
LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
ITALIC_RE = re.compile(r"\*([^*]+)\*")

PUNCT_RE = re.compile(r"[^\w\s]")
SPACE_RE = re.compile(r"\s+")
PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


def _as_text(raw: object) -> str:
    if raw is None:
        return ""
    return raw if isinstance(raw, str) else str(raw)


def strip_markup(raw: object) -> str:
    """Drop MDX structure (frontmatter, imports, code, tags, tables) and keep prose.

    Non-string content (a bare number from YAML, say) is read as its text form.
    """
    text = _as_text(raw)
    if not text:
        return ""
    text = FRONTMATTER_RE.sub("", text, count=1)
    text = IMPORT_LINE_RE.sub("", text)
    text = CODE_BLOCK_RE.sub("", text)
    text = TAG_RE.sub("", text)
    text = TABLE_ROW_RE.sub("", text)
    text = HEADING_RE.sub("", text)
    text = LINK_RE.sub(r"\1", text)
    text = BOLD_RE.sub(r"\1", text)
    return ITALIC_RE.sub(r"\1", text)


def normalize_text(text: str) -> str:
    lowered = (text or "").lower()
    lowered = PUNCT_RE.sub(" ", lowered)
    return SPACE_RE.sub(" ", lowered).strip()


def extract_content(raw: object) -> str:
    return normalize_text(strip_markup(raw))


def remove_template_phrases(normalized: str, phrases: Iterable[str]) -> str:
    result = normalized
    for phrase in phrases:
        if not phrase:
            continue
        pattern = re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)
        result = pattern.sub(" ", result)
    return SPACE_RE.sub(" ", result).strip()


def split_paragraphs(raw: object) -> list[str]:
    cleaned = strip_markup(raw)
    if not cleaned:
        return []
    return PARAGRAPH_BREAK_RE.split(cleaned)
