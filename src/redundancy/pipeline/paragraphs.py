from __future__ import annotations

from typing import Iterable

from redundancy.constants import (
    DEFAULT_TEMPLATE_PHRASES,
    MIN_PARAGRAPH_SHINGLES,
    MIN_PARAGRAPH_WORDS,
    PARAGRAPH_KEY_SHINGLES,
    PARAGRAPH_PREVIEW_CHARS,
    SHINGLE_SIZE,
)
from redundancy.models import ParagraphOccurrence, Page, RepeatedParagraph
from redundancy.pipeline.clean_text import normalize_text, remove_template_phrases, split_paragraphs
from redundancy.pipeline.normalize import build_shingles, tokenize


def page_paragraphs(
    raw: str | None,
    *,
    template_phrases: Iterable[str] = DEFAULT_TEMPLATE_PHRASES,
    min_words: int = MIN_PARAGRAPH_WORDS,
) -> list[str]:
    phrases = list(template_phrases)
    out: list[str] = []
    for chunk in split_paragraphs(raw):
        text = remove_template_phrases(normalize_text(chunk), phrases)
        if len(tokenize(text)) >= min_words:
            out.append(text)
    return out


def _paragraph_key(shingles: frozenset[str]) -> str:
    return "|".join(sorted(shingles)[:PARAGRAPH_KEY_SHINGLES])


def find_repeated_paragraphs(
    pages: list[Page],
    *,
    shingle_size: int = SHINGLE_SIZE,
    template_phrases: Iterable[str] = DEFAULT_TEMPLATE_PHRASES,
) -> list[RepeatedParagraph]:
    """Group paragraphs that recur across the corpus by a shingle fingerprint."""
    phrases = list(template_phrases)
    index: dict[str, list[ParagraphOccurrence]] = {}
    for page in pages:
        for idx, paragraph in enumerate(page_paragraphs(page.raw_content, template_phrases=phrases)):
            shingles = build_shingles(tokenize(paragraph), shingle_size)
            if len(shingles) < MIN_PARAGRAPH_SHINGLES:
                continue
            index.setdefault(_paragraph_key(shingles), []).append(
                ParagraphOccurrence(
                    page_id=str(page.id),
                    path=page.path,
                    paragraph_index=idx,
                    preview=paragraph[:PARAGRAPH_PREVIEW_CHARS],
                )
            )

    repeated = [
        RepeatedParagraph(preview=occurrences[0].preview, count=len(occurrences), occurrences=occurrences)
        for occurrences in index.values()
        if len(occurrences) > 1
    ]
    repeated.sort(key=lambda rp: (-rp.count, rp.preview))
    return repeated
