# regintel/features/keywords.py

from __future__ import annotations

import re

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, List, Mapping, Pattern, Sequence, Tuple


@dataclass
class KeywordSignals:
    """
    Keyword hits for different intent buckets (one bucket per document type).
    """
    bucket_hits: Dict[str, int]          # distinct terms matched per bucket
    term_hits: Dict[str, Dict[str, int]] # per-bucket per-term counts


_EMPHASIS_RE = re.compile(r"[*_`]+")
_DASHES_RE = re.compile(r"[‐‑‒–—―−]")
_QUOTES = str.maketrans({"‘": "'", "’": "'", "“": '"', "”": '"'})
_TERM_SPLIT_RE = re.compile(r"[\s\-]+")


def normalize_text(text: str) -> str:
    """
    Fold markdown emphasis and typographic punctuation so that
    '**MLRO**' and 'risk‑based' match like plain text. Line breaks are kept.
    """
    t = text or ""
    t = _DASHES_RE.sub("-", t)
    t = t.translate(_QUOTES)
    return _EMPHASIS_RE.sub("", t)


@lru_cache(maxsize=4096)
def term_pattern(term: str) -> Pattern:
    """
    Compile a rubric term into a case-insensitive whole-word regex.

    - words may be separated by any run of spaces/hyphens ("risk-based" == "risk based")
    - a trailing '*' on a word is a prefix wildcard ("segregat*" -> segregation, segregated)
    """
    parts: List[str] = []
    for word in _TERM_SPLIT_RE.split(term.strip().lower()):
        if not word:
            continue
        if word.endswith("*"):
            parts.append(re.escape(word[:-1]) + r"\w*")
        else:
            parts.append(re.escape(word))
    body = r"[\s\-]+".join(parts)
    return re.compile(r"(?<!\w)" + body + r"(?!\w)", re.I)


def first_match(text: str, term: str) -> Tuple[int, str] | None:
    """Position and literal snippet of the first occurrence of `term`, or None."""
    m = term_pattern(term).search(text)
    if not m:
        return None
    return m.start(), " ".join(m.group(0).split())


def count_term(text: str, term: str) -> int:
    return len(term_pattern(term).findall(text))


def find_terms(text: str, terms: Iterable[str]) -> List[Tuple[int, str, str]]:
    """
    Return (position, term, snippet) for each term present in text,
    in the order the terms were given.
    """
    found: List[Tuple[int, str, str]] = []
    for term in terms:
        hit = first_match(text, term)
        if hit:
            found.append((hit[0], term, hit[1]))
    return found


def ordered_snippets(hits: Sequence[Tuple[int, str, str]]) -> List[str]:
    """Deduplicate snippets case-insensitively, ordered by first appearance."""
    seen = set()
    out: List[str] = []
    for _, _, snippet in sorted(hits, key=lambda h: h[0]):
        key = snippet.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(snippet)
    return out


def count_keywords(text: str, buckets: Mapping[str, Sequence[str]]) -> KeywordSignals:
    """
    Count keyword/phrase hits by bucket.

    Notes:
    - Matching is whole-word and case-insensitive on normalised text.
    - bucket_hits counts distinct terms, not occurrences, so repetition is not rewarded.

    Returns:
        KeywordSignals
    """
    t = normalize_text(text)

    bucket_hits: Dict[str, int] = {}
    term_hits: Dict[str, Dict[str, int]] = {}

    for bucket, terms in buckets.items():
        term_hits[bucket] = {}
        for term in terms:
            c = count_term(t, term)
            if c:
                term_hits[bucket][term] = c
        bucket_hits[bucket] = len(term_hits[bucket])

    return KeywordSignals(bucket_hits=bucket_hits, term_hits=term_hits)


def bucket_fraction(hits: int, total_terms: int) -> float:
    """
    Share of a bucket's vocabulary found in the text, in [0, 1].
    """
    return min(1.0, hits / float(max(1, total_terms)))
