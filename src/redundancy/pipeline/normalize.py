from __future__ import annotations

from typing import Iterable

from redundancy.constants import MIN_DISTINCT_WORDS, MIN_WORD_LENGTH, SHINGLE_SIZE
from redundancy.models import NormalizedPage, Page
from redundancy.pipeline.clean_text import extract_content, remove_template_phrases


def tokenize(text: str) -> list[str]:
    return [w for w in (text or "").split() if w]


def long_word_set(words: Iterable[str], min_length: int = MIN_WORD_LENGTH) -> frozenset[str]:
    return frozenset(w for w in words if len(w) >= min_length)


def build_shingles(words: list[str], size: int = SHINGLE_SIZE) -> frozenset[str]:
    if size < 1 or len(words) < size:
        return frozenset()
    return frozenset(" ".join(words[i : i + size]) for i in range(len(words) - size + 1))


def is_eligible(page: NormalizedPage, min_distinct_words: int = MIN_DISTINCT_WORDS) -> bool:
    return len(page.long_words) > min_distinct_words


def _field_text(value: object) -> str:
    return "" if value is None else str(value)


def normalize_page(
    page: Page,
    *,
    shingle_size: int = SHINGLE_SIZE,
    min_word_length: int = MIN_WORD_LENGTH,
    template_phrases: Iterable[str] = (),
) -> NormalizedPage:
    text = extract_content(page.raw_content)
    if template_phrases:
        text = remove_template_phrases(text, template_phrases)
    words = tokenize(text)
    return NormalizedPage(
        page_id=str(page.id),
        path=_field_text(page.path),
        title=_field_text(page.title),
        content_format=_field_text(page.content_format).strip() or None,
        text=text,
        long_words=long_word_set(words, min_word_length),
        shingles=build_shingles(words, shingle_size),
    )
