"""Deterministic on-page SEO heuristics.

Four independent 25-point checks make up the score. Suggestions are built
from fixed templates, so identical input always gives identical output.
"""

from models import MetaSuggestion, PageSignals

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
DESCRIPTION_MIN_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 160
CHECK_POINTS = 25
MAX_SCORE = 100

TITLE_TEMPLATES = (
    "{keyword} | Complete Guide & Best Practices",
    "Best {keyword} Solutions - Expert Tips & Tools",
)
DESCRIPTION_TEMPLATE = (
    "Discover expert insights about {topic}. Get actionable tips, best practices, "
    "and proven strategies to improve your results."
)
GENERIC_TOPIC = "this topic"


def title_ok(signals: PageSignals) -> bool:
    title = signals.get("title")
    return bool(title) and TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH


def description_ok(signals: PageSignals) -> bool:
    description = signals.get("meta_description")
    return bool(description) and DESCRIPTION_MIN_LENGTH <= len(description) <= DESCRIPTION_MAX_LENGTH


def single_h1(signals: PageSignals) -> bool:
    return signals["headings"]["h1"] == 1


def has_h2(signals: PageSignals) -> bool:
    return signals["headings"]["h2"] > 0


CHECKS = (title_ok, description_ok, single_h1, has_h2)


def score_signals(signals: PageSignals) -> int:
    """Return a score in {0, 25, 50, 75, 100}."""
    score = sum(CHECK_POINTS for check in CHECKS if check(signals))
    return min(score, MAX_SCORE)


def improvement_tips(signals: PageSignals) -> list[str]:
    """One tip per failed check, in check order."""
    tips: list[str] = []
    title = signals.get("title")
    if not title_ok(signals):
        if not title:
            tips.append("Add a title tag")
        else:
            tips.append(
                f"Title should be {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} characters (currently {len(title)})"
            )
    description = signals.get("meta_description")
    if not description_ok(signals):
        if not description:
            tips.append("Add a meta description")
        else:
            tips.append(
                f"Meta description should be {DESCRIPTION_MIN_LENGTH}-{DESCRIPTION_MAX_LENGTH} "
                f"characters (currently {len(description)})"
            )
    if not single_h1(signals):
        h1_count = signals["headings"]["h1"]
        if h1_count == 0:
            tips.append("Add exactly one H1 heading")
        else:
            tips.append(f"Use exactly one H1 heading (found {h1_count})")
    if not has_h2(signals):
        tips.append("Structure content with H2 subheadings")
    return tips


def _suggestion(kind: str, text: str) -> MetaSuggestion:
    return {"kind": kind, "text": text, "length": len(text)}


def suggest_meta_tags(keyword: str | None) -> list[MetaSuggestion]:
    """
    Two keyword-based title candidates (only when a keyword is given) and
    one description candidate, keyword-aware if possible.
    """
    cleaned = (keyword or "").strip()
    suggestions: list[MetaSuggestion] = []
    if cleaned:
        suggestions.extend(_suggestion("title", t.format(keyword=cleaned)) for t in TITLE_TEMPLATES)
    suggestions.append(
        _suggestion("description", DESCRIPTION_TEMPLATE.format(topic=cleaned or GENERIC_TOPIC))
    )
    return suggestions
