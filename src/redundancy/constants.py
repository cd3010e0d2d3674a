from __future__ import annotations

SHINGLE_SIZE = 5
MIN_WORD_LENGTH = 5
# Eligible pages need strictly more distinct long words than this.
MIN_DISTINCT_WORDS = 10
# Pair reporting cutoff as a 0-1 fraction, inclusive.
SIMILARITY_THRESHOLD = 0.10
WORD_SIMILARITY_THRESHOLD = 0.25
TOP_SIMILAR_PAGES = 5

MIN_PARAGRAPH_WORDS = 20
MIN_PARAGRAPH_SHINGLES = 5
PARAGRAPH_KEY_SHINGLES = 10
PARAGRAPH_PREVIEW_CHARS = 100

EXPORT_PAIR_LIMIT = 100
REPORT_PAIR_LIMIT = 20
REPORT_WORD_PAIR_LIMIT = 15
REPORT_PARAGRAPH_LIMIT = 15

DEFAULT_CONFIG_PATH = "config/redundancy.yaml"

# Headings and phrases that pages repeat on purpose. Normalized form.
DEFAULT_TEMPLATE_PHRASES = [
    # section headers
    "quick assessment",
    "organization details",
    "overview",
    "history",
    "key personnel",
    "funding history",
    "strengths and limitations",
    "external links",
    "sources",
    "references",
    "see also",
    "related pages",
    "backlinks",
    # projection pages
    "executive summary",
    "timeline phases",
    "branch points",
    "preconditions",
    "warning signs",
    "valuable actions",
    "probability assessment",
    "who benefits",
    "who loses",
    # risk pages
    "risk assessment",
    "responses that address this risk",
    "why this matters",
    "key uncertainties",
    "how it works",
    "limitations",
    "critical assessment",
    # table headers
    "dimension",
    "rating",
    "justification",
    "aspect",
    "assessment",
    "severity",
    "likelihood",
    "timeline",
    "trend",
    "tractability",
    "neglectedness",
    "importance",
    "description",
    # structural phrases
    "this page is part of",
    "for more information see",
    "related topics include",
    "key takeaways",
    "bottom line",
    "summary",
    "conclusion",
    # organization pages
    "founded",
    "headquarters",
    "website",
    "leadership",
    "annual budget",
    "funding sources",
    "key programs",
    "notable projects",
    "team size",
    "staff count",
]
