# core/intent_classifier.py
"""
Intent Classifier

Maps raw palette text to a tagged ``Intent``. Pure, deterministic and total:
every input (including the empty string) yields an intent, nothing raises.

Rules are checked in a fixed order and the first match wins. The order is
load-bearing: ``quit https://x.com`` must stay a Quit even though it also
looks like a URL, and ``/chat ...`` must be claimed before the path rule sees
its leading slash.
"""

import logging
import re
from typing import Callable, List, Optional, Tuple

from navi.models import Intent, IntentType

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

URL_TLDS = (
    "com|net|org|io|dev|co|edu|gov|mil|int|app|xyz|tech|online|site|website|"
    "store|shop|blog|info|biz|tv|me|us|uk|ca|au|de|fr|jp|cn|in|br|ru|kr|es|it|"
    "nl|se|no|dk|fi|pl|cz|hu|ro|gr|pt|ie|nz|za|mx|ar|cl|pe|ve|ec|uy|py|bo|cr|"
    "pa|gt|hn|ni|sv|bz|jm|tt|bb|gd|lc|vc|ag|dm|kn|bs|sr|gy|gf|fk|ai|vg|ky|bm|"
    "tc|ms|aw|cw|sx|bq|mf|bl|pm|wf|pf|nc|vu|fj|pg|sb|ki|nr|pw|fm|mh|as|gu|mp|"
    "vi|pr|do|ht|cu"
)

_URL_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_URL_LOCALHOST = re.compile(r"^localhost(:\d+)?(?=$|[/:])", re.IGNORECASE)
_URL_WWW = re.compile(r"^www\.", re.IGNORECASE)
_URL_BARE_DOMAIN = re.compile(
    r"^[a-z0-9-]+(\.[a-z0-9-]+)*\.(" + URL_TLDS + r")(?=$|[/:?#])",
    re.IGNORECASE,
)

_PATH_PREFIX = re.compile(r"^([A-Za-z]:[\\/]|\\\\|\.\.?[\\/]|[\\/])")

_MATH_ONLY = re.compile(r"^[\d+\-*/().\s]+$")
_MATH_OPERATOR = re.compile(r"[+\-*/()]")
_DIGIT = re.compile(r"\d")

_SEARCH_KEYWORDS = re.compile(r"\b(search|find|lookup|google|bing)\b", re.IGNORECASE)

_CHAT_PREFIX = re.compile(r"^/(chat|ai)\s*", re.IGNORECASE)
_APP_VERB = re.compile(r"^(open|launch|start)\s+", re.IGNORECASE)

LONG_QUERY_LENGTH = 50


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _keyword_command(lower: str, keywords: Tuple[str, ...]) -> Optional[str]:
    """Return the matched keyword when ``lower`` is it alone or it plus whitespace."""
    for kw in keywords:
        if re.match(rf"{re.escape(kw)}(\s|$)", lower):
            return kw
    return None


def _strip_keyword(trimmed: str, keyword: str) -> str:
    return trimmed[len(keyword):].strip()


def is_url(text: str) -> bool:
    return bool(
        _URL_SCHEME.match(text)
        or _URL_LOCALHOST.match(text)
        or _URL_WWW.match(text)
        or _URL_BARE_DOMAIN.match(text)
        or "://" in text
    )


def is_path(text: str) -> bool:
    has_separator = "\\" in text or "/" in text
    return bool(_PATH_PREFIX.match(text)) and has_separator and len(text) > 2


def is_calculation(text: str) -> bool:
    if _MATH_ONLY.match(text):
        return True
    return bool(_MATH_OPERATOR.search(text) and _DIGIT.search(text))


def is_web_search(text: str) -> bool:
    return len(text) > LONG_QUERY_LENGTH and bool(_SEARCH_KEYWORDS.search(text))


# ---------------------------------------------------------------------------
# Rules (order matters)
# ---------------------------------------------------------------------------

def _rule_quit(trimmed: str, lower: str) -> Optional[Intent]:
    kw = _keyword_command(lower, ("quit",))
    if kw:
        return Intent(type=IntentType.QUIT, value=_strip_keyword(trimmed, kw), confidence=1.0)
    return None


def _rule_switch(trimmed: str, lower: str) -> Optional[Intent]:
    kw = _keyword_command(lower, ("sw", "switch", "focus"))
    if kw:
        return Intent(type=IntentType.SWITCH, value=_strip_keyword(trimmed, kw), confidence=1.0)
    return None


def _rule_recent(trimmed: str, lower: str) -> Optional[Intent]:
    # "recent files" / "recent folders" are covered by the "recent " prefix
    kw = _keyword_command(lower, ("recent",))
    if kw:
        return Intent(type=IntentType.RECENT, value=_strip_keyword(trimmed, kw), confidence=1.0)
    return None


def _rule_url(trimmed: str, lower: str) -> Optional[Intent]:
    if is_url(trimmed):
        return Intent(type=IntentType.URL, value=trimmed, confidence=0.95)
    return None


def _rule_chat(trimmed: str, lower: str) -> Optional[Intent]:
    if lower.startswith("/chat") or lower.startswith("/ai"):
        value = _CHAT_PREFIX.sub("", trimmed, count=1).strip()
        return Intent(type=IntentType.CHAT, value=value, confidence=1.0)
    return None


def _rule_path(trimmed: str, lower: str) -> Optional[Intent]:
    if is_path(trimmed):
        return Intent(type=IntentType.PATH, value=trimmed, confidence=0.9)
    return None


def _rule_calculate(trimmed: str, lower: str) -> Optional[Intent]:
    if is_calculation(trimmed):
        return Intent(type=IntentType.CALCULATE, value=trimmed, confidence=0.85)
    return None


def _rule_app_verb(trimmed: str, lower: str) -> Optional[Intent]:
    if _APP_VERB.match(trimmed):
        app_name = _APP_VERB.sub("", trimmed, count=1).strip()
        if app_name:
            return Intent(type=IntentType.APP, value=app_name, confidence=0.9)
    return None


def _rule_search(trimmed: str, lower: str) -> Optional[Intent]:
    if is_web_search(trimmed):
        return Intent(type=IntentType.SEARCH, value=trimmed, confidence=0.7)
    return None


def _rule_app_default(trimmed: str, lower: str) -> Optional[Intent]:
    if len(trimmed) <= LONG_QUERY_LENGTH:
        return Intent(type=IntentType.APP, value=trimmed, confidence=0.6)
    return Intent(type=IntentType.APP, value=trimmed, confidence=0.4)


RULES: List[Callable[[str, str], Optional[Intent]]] = [
    _rule_quit,
    _rule_switch,
    _rule_recent,
    _rule_url,
    _rule_chat,
    _rule_path,
    _rule_calculate,
    _rule_app_verb,
    _rule_search,
    _rule_app_default,
]


def classify(text: str) -> Intent:
    """
    Classify palette input.

    Args:
        text: Raw input buffer (untrimmed).

    Returns:
        The first matching ``Intent``; ``Unknown`` for blank input.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return Intent(type=IntentType.UNKNOWN, value="", confidence=0.0)

    lower = trimmed.lower()
    for rule in RULES:
        intent = rule(trimmed, lower)
        if intent is not None:
            return intent

    # unreachable: _rule_app_default always matches
    return Intent(type=IntentType.UNKNOWN, value=trimmed, confidence=0.0)
