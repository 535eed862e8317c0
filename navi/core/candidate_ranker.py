# core/candidate_ranker.py
"""
Candidate Ranker

Turns raw collaborator output into the ordered suggestion list for an intent.
Synchronous and pure: same inputs, same output, no I/O.

Scoring tiers (app-like intents, case-insensitive):
    exact            10000
    starts-with      5000 + (len(q) / len(name)) * 2000
    contains         3000 + (len(q) / len(name)) * 1000
    per-word         sum of word scores + completeness bonus
    subsequence      (in-order char matches / len(q)) * 300, only below 100
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from navi.models import (
    Candidate,
    CandidateKind,
    Intent,
    IntentType,
    SYSTEM_COMMANDS,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10

EXACT_SCORE = 10000.0
PREFIX_BASE, PREFIX_SPAN = 5000.0, 2000.0
CONTAINS_BASE, CONTAINS_SPAN = 3000.0, 1000.0
WORD_PREFIX, WORD_CONTAINS, WORD_REVERSE = 2000.0, 1000.0, 800.0
COMPLETENESS_BONUS = 1000.0
COVERAGE_WEIGHT = 500.0
SUBSEQUENCE_WEIGHT = 300.0
SUBSEQUENCE_CUTOFF = 100.0
REVERSE_MIN_WORD = 3

# Intent -> minimum confidence at which app results are suppressed
GATING_THRESHOLDS: Dict[IntentType, float] = {
    IntentType.URL: 0.9,
    IntentType.PATH: 0.9,
    IntentType.CALCULATE: 0.85,
}

_RECENT_KIND_KEYWORDS = {
    "files": CandidateKind.RECENT_FILE,
    "file": CandidateKind.RECENT_FILE,
    "folders": CandidateKind.RECENT_FOLDER,
    "folder": CandidateKind.RECENT_FOLDER,
}

_WORD_SPLIT = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def _words(text: str) -> List[str]:
    return [w for w in _WORD_SPLIT.split(text) if w]


def _word_score(query_words: List[str], name_words: List[str]) -> Tuple[float, int]:
    total = 0.0
    matched = 0
    for qw in query_words:
        for nw in name_words:
            if nw.startswith(qw):
                total += WORD_PREFIX * (len(qw) / len(nw))
            elif qw in nw:
                total += WORD_CONTAINS * (len(qw) / len(nw))
            elif len(nw) >= REVERSE_MIN_WORD and qw.startswith(nw):
                total += WORD_REVERSE * (len(nw) / len(qw))
            else:
                continue
            matched += 1
            break
    return total, matched


def _subsequence_score(query: str, name: str) -> float:
    qi = 0
    for ch in name:
        if qi < len(query) and ch == query[qi]:
            qi += 1
    return (qi / len(query)) * SUBSEQUENCE_WEIGHT


def score(query: str, name: str) -> float:
    """
    Relevance of ``name`` for ``query``; 0.0 means no match.

    Both strings are compared case-insensitively after trimming.
    """
    q = (query or "").strip().lower()
    n = (name or "").strip().lower()
    if not q or not n:
        return 0.0

    if n == q:
        return EXACT_SCORE
    if n.startswith(q):
        return PREFIX_BASE + (len(q) / len(n)) * PREFIX_SPAN
    if q in n:
        return CONTAINS_BASE + (len(q) / len(n)) * CONTAINS_SPAN

    result = 0.0
    query_words = _words(q)
    word_total, matched = _word_score(query_words, _words(n))
    if matched:
        result = word_total
        if matched == len(query_words):
            result += COMPLETENESS_BONUS
        result += (matched / len(query_words)) * COVERAGE_WEIGHT

    if result < SUBSEQUENCE_CUTOFF:
        result = max(result, _subsequence_score(q, n))

    return result


def _sort_key(candidate: Candidate) -> Tuple[float, str]:
    return (-candidate.score, candidate.display_name.lower())


def _dedupe(candidates: Iterable[Candidate], key) -> List[Candidate]:
    """Keep the first occurrence per key; callers pass best-first input."""
    seen = set()
    out: List[Candidate] = []
    for c in candidates:
        k = key(c)
        if k in seen:
            continue
        seen.add(k)
        out.append(c)
    return out


def _exact_prefix_alpha(term: str, name: str) -> Tuple[int, str]:
    lowered = name.lower()
    if term and lowered == term:
        tier = 0
    elif term and lowered.startswith(term):
        tier = 1
    else:
        tier = 2
    return tier, lowered


# ---------------------------------------------------------------------------
# Per-intent rankers
# ---------------------------------------------------------------------------

def rank_apps(candidates: Iterable[Candidate], query: str, limit: int = DEFAULT_LIMIT) -> List[Candidate]:
    scored: List[Candidate] = []
    for c in candidates:
        s = score(query, c.display_name)
        if s > 0:
            scored.append(c.model_copy(update={"score": s, "kind": CandidateKind.APP}))
    scored.sort(key=_sort_key)
    ranked = _dedupe(scored, key=lambda c: c.display_name.strip().lower())
    return ranked[:limit]


def rank_processes(
    candidates: Iterable[Candidate],
    term: str,
    kind: CandidateKind,
    limit: int = DEFAULT_LIMIT,
) -> List[Candidate]:
    """Filter running processes by substring and order exact > prefix > alpha."""
    wanted = (term or "").strip().lower()
    filtered = [
        c.model_copy(update={"kind": kind})
        for c in candidates
        if not wanted or wanted in c.display_name.lower()
    ]
    filtered.sort(key=lambda c: _exact_prefix_alpha(wanted, c.display_name))
    ranked = _dedupe(filtered, key=lambda c: c.display_name.strip().lower())
    return ranked[:limit]


def parse_recent_query(value: str) -> Tuple[Optional[CandidateKind], str]:
    """Split ``files foo`` into (RECENT_FILE, "foo")."""
    words = _words((value or "").strip())
    kind = None
    if words and words[0].lower() in _RECENT_KIND_KEYWORDS:
        kind = _RECENT_KIND_KEYWORDS[words[0].lower()]
        words = words[1:]
    return kind, " ".join(words)


def filter_recent(candidates: Iterable[Candidate], value: str, limit: int = DEFAULT_LIMIT) -> List[Candidate]:
    kind, term = parse_recent_query(value)
    term = term.lower()
    out = [
        c for c in candidates
        if (kind is None or c.kind == kind)
        and (not term or term in c.display_name.lower())
    ]
    return out[:limit]


def match_system_commands(query: str) -> List[Candidate]:
    q = (query or "").strip().lower()
    if not q:
        return []
    matches = [
        cmd.to_candidate()
        for cmd in SYSTEM_COMMANDS
        if q in cmd.name or q in cmd.display.lower()
    ]
    matches.sort(key=lambda c: _exact_prefix_alpha(q, c.display_name))
    return matches


def is_gated(intent: Intent) -> bool:
    """True when a confident non-app intent suppresses app results."""
    threshold = GATING_THRESHOLDS.get(intent.type)
    return threshold is not None and intent.confidence >= threshold


def app_query(intent: Intent, query_text: str) -> str:
    if intent.type == IntentType.APP:
        return intent.value
    return (query_text or "").strip()


def rank(
    intent: Intent,
    raw_candidates: Iterable[Candidate],
    query_text: str,
    limit: int = DEFAULT_LIMIT,
) -> List[Candidate]:
    """
    Produce the suggestion list for ``intent``.

    Args:
        intent: Result of ``classify(query_text)``.
        raw_candidates: Collaborator output appropriate for the intent
            (installed apps, running processes or recent items).
        query_text: The raw input the intent was classified from.
        limit: Maximum number of candidates returned.
    """
    if not (query_text or "").strip():
        return []

    raw = list(raw_candidates or [])

    if intent.type in (IntentType.SWITCH, IntentType.QUIT):
        kind = CandidateKind.SWITCH if intent.type == IntentType.SWITCH else CandidateKind.QUIT
        return rank_processes(raw, intent.value, kind, limit)

    if intent.type == IntentType.RECENT:
        return filter_recent(raw, intent.value, limit)

    query = app_query(intent, query_text)
    system = match_system_commands(query)
    if is_gated(intent):
        return system[:limit]

    apps = rank_apps(raw, query, limit)
    return (system + apps)[:limit]
