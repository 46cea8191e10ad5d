"""
Right-to-left text post-processing.

Machine translations into RTL locales keep Latin technical terms inline
(framework names, acronyms). Those runs are wrapped with an explicit LTR
direction so browsers do not reorder them.
"""

import re

LTR_OPEN = '<span dir="ltr">'
LTR_CLOSE = "</span>"

# Markers that indicate the text was already processed
_PROCESSED_MARKERS = ('<span dir="ltr">', '<span dir="rtl">', "<bdi>")

TECHNICAL_TERMS: tuple[str, ...] = (
    "React Native", "React", "Next.js", "Node.js", "TypeScript", "JavaScript",
    "Python", "Flutter", "Dart", "AWS", "Firebase", "Supabase", "Docker",
    "Kubernetes", "GitHub Actions", "GitHub", "Git", "PostgreSQL", "MySQL",
    "MongoDB", "Redis", "Tailwind CSS", "GraphQL", "REST", "API", "ETL",
    "SQL", "CI/CD", "DevOps", "OpenAI", "iOS", "Android", "Linux",
)

# Longest terms first so "React Native" wins over "React"
_TERMS_RE = re.compile(
    r"(?<![\w/])("
    + "|".join(re.escape(t) for t in sorted(TECHNICAL_TERMS, key=len, reverse=True))
    + r")(?![\w/])",
    re.IGNORECASE,
)
_CANONICAL = {t.lower(): t for t in TECHNICAL_TERMS}


def is_processed(text: str) -> bool:
    """Check whether text already carries direction markup."""
    return any(marker in text for marker in _PROCESSED_MARKERS)


def wrap_technical_terms(text: str) -> str:
    """Wrap known technical terms in an LTR span, in a single pass."""

    def _wrap(match: re.Match[str]) -> str:
        term = _CANONICAL.get(match.group(1).lower(), match.group(1))
        return f"{LTR_OPEN}{term}{LTR_CLOSE}"

    return _TERMS_RE.sub(_wrap, text)


def process_mixed_content(text: str, is_rtl: bool) -> str:
    """
    Prepare translated text for display in its locale.

    LTR text is returned unchanged. RTL text gets its technical terms
    wrapped, unless it was already processed.
    """
    if not is_rtl or not text or is_processed(text):
        return text
    return wrap_technical_terms(text)
