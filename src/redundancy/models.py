from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class Page:
    id: str
    path: str = ""
    title: str = ""
    content_format: str | None = None
    raw_content: str | None = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Page":
        raw_content = data.get("raw_content", data.get("rawContent"))
        content_format = data.get("content_format", data.get("contentFormat"))
        return cls(
            id=str(data.get("id") or ""),
            path=str(data.get("path", "") or ""),
            title=str(data.get("title", "") or ""),
            content_format=str(content_format) if content_format is not None else None,
            raw_content=str(raw_content) if raw_content is not None else None,
        )


@dataclass(slots=True)
class NormalizedPage:
    page_id: str
    path: str
    title: str
    content_format: str | None
    text: str
    long_words: frozenset[str]
    shingles: frozenset[str]


@dataclass(slots=True)
class FormatCluster:
    content_format: str | None
    pages: list[NormalizedPage] = field(default_factory=list)


@dataclass(slots=True)
class Comparison:
    """Raw pairwise scores for two pages of one cluster, as 0-1 fractions."""

    a: NormalizedPage
    b: NormalizedPage
    shingle_similarity: float
    word_similarity: float


@dataclass(slots=True)
class SimilarPage:
    page_id: str
    similarity: int
    title: str = ""
    path: str = ""


@dataclass(slots=True)
class PageRedundancy:
    max_similarity: int = 0
    avg_similarity: int = 0
    similar_pages: list[SimilarPage] = field(default_factory=list)


@dataclass(slots=True)
class SimilarityPair:
    page_a: str
    page_b: str
    similarity: int
    path_a: str = ""
    path_b: str = ""
    title_a: str = ""
    title_b: str = ""
    shingle_similarity: int = 0
    word_similarity: int = 0


@dataclass(slots=True)
class WordPair:
    page_a: str
    page_b: str
    similarity: int
    word_similarity: int
    path_a: str = ""
    path_b: str = ""


@dataclass(slots=True)
class ParagraphOccurrence:
    page_id: str
    path: str
    paragraph_index: int
    preview: str


@dataclass(slots=True)
class RepeatedParagraph:
    preview: str
    count: int
    occurrences: list[ParagraphOccurrence] = field(default_factory=list)


@dataclass(slots=True)
class RedundancyResult:
    page_redundancy: dict[str, PageRedundancy] = field(default_factory=dict)
    pairs: list[SimilarityPair] = field(default_factory=list)
    word_pairs: list[WordPair] = field(default_factory=list)
    repeated_paragraphs: list[RepeatedParagraph] = field(default_factory=list)
    run_id: str = ""
