"""Query normalization and search term extraction."""

import re
import unicodedata

from woofsearch.search.language import LanguageResources, get_default_resources

MIN_TERM_LENGTH = 3

_WHITESPACE = re.compile(r"\s+")


def _is_kept(char: str) -> bool:
    # Letters, combining marks and digits make up words in every script
    # (Devanagari vowel signs are marks, not letters).
    if char == "_" or char == "-" or char.isspace():
        return True
    return unicodedata.category(char)[0] in ("L", "M", "N")


def normalize_query(
    raw_query: str,
    language: str | None = None,
    resources: LanguageResources | None = None,
) -> str:
    """Normalize a raw query string.

    Lowercases, replaces everything except word characters, whitespace and
    hyphens with spaces, and collapses whitespace. For languages with a
    transliteration table, the Latin equivalents of every script term found
    in the query are appended so both spellings match downstream.

    Args:
        raw_query: Query as typed by the user
        language: ISO language code
        resources: Language tables (default: bundled resources)

    Returns:
        Normalized query, empty for blank input
    """
    resources = resources or get_default_resources()

    normalized = unicodedata.normalize("NFC", raw_query).lower().strip()
    normalized = "".join(c if _is_kept(c) else " " for c in normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()

    for script_term, latin_terms in resources.transliterations_for(language).items():
        if script_term in normalized:
            normalized = f"{normalized} {' '.join(latin_terms)}"

    return normalized.strip()


def extract_terms(
    normalized: str,
    language: str | None = None,
    resources: LanguageResources | None = None,
) -> list[str]:
    """Split a normalized query into significant, synonym-expanded terms.

    Tokens of two characters or fewer are dropped. Terms are deduplicated
    keeping first-seen order, so the result is stable for a given query.

    Args:
        normalized: Output of normalize_query
        language: ISO language code (synonyms are language independent)
        resources: Language tables (default: bundled resources)

    Returns:
        Ordered list of unique terms
    """
    resources = resources or get_default_resources()

    terms = [token for token in normalized.split() if len(token) >= MIN_TERM_LENGTH]

    expanded = list(terms)
    for term in terms:
        expanded.extend(resources.synonyms.get(term, []))

    return list(dict.fromkeys(expanded))
