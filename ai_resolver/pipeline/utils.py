from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Sequence

from ai_resolver.errors import ValidationError
from ai_resolver.models import Citation, Decision, Fact, MarketQuestion, WebSource

DESCRIPTION_QUERY_LIMIT = 200
FALLBACK_CITATION_WEIGHT = 0.5

_CLOSERS = {"{": "}", "[": "]"}


def extract_json(text: str, opener: str = "{") -> str:
    """
    Cut the first balanced JSON object (or array, with opener="[") out of text.

    Model output often wraps JSON in prose or code fences. Brackets inside
    string literals are ignored. If there is no opener or it never closes,
    the text is returned unchanged and the JSON parser reports the problem.
    """
    closer = _CLOSERS[opener]
    start = text.find(opener)
    if start == -1:
        return text

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return text


def build_search_query(question: MarketQuestion) -> str:
    """Question text, plus the description when it is short enough to help the search."""
    if question.description and len(question.description) < DESCRIPTION_QUERY_LIMIT:
        return f"{question.question} {question.description}"
    return question.question


def build_citations(sources: Sequence[WebSource], facts: Sequence[Fact]) -> List[Citation]:
    """
    Weight each discovered source by the facts that cite it.

    A fact's confidence is split equally across its source URLs and summed per
    URL. Sources keep their discovery order; those with no positive weight are
    dropped. If nothing matches, every source is cited at weight 0.5.
    """
    weights: Dict[str, float] = defaultdict(float)
    for fact in facts:
        if not fact.sources:
            continue
        share = fact.confidence / len(fact.sources)
        for url in fact.sources:
            weights[url] += share

    citations = [
        Citation(url=s.url, title=s.title, snippet=s.snippet, weight=weights[s.url])
        for s in sources
        if weights.get(s.url, 0) > 0
    ]
    if citations:
        return citations

    return [
        Citation(url=s.url, title=s.title, snippet=s.snippet, weight=FALLBACK_CITATION_WEIGHT)
        for s in sources
    ]


def validate_decision_fields(outcome_id: Any, confidence: Any) -> None:
    """
    Check the raw outcome and confidence a model returned, before any coercion.

    JSON booleans, strings and fractional numbers are rejected rather than
    converted, so only a literal 0 or 1 can ever be signed.
    """
    if isinstance(outcome_id, bool) or not isinstance(outcome_id, int):
        raise ValidationError("outcomeId", f"invalid outcome ID: {outcome_id!r} (must be an integer)", outcome_id)
    if outcome_id not in (0, 1):
        raise ValidationError("outcomeId", f"invalid outcome ID: {outcome_id} (must be 0 or 1)", outcome_id)
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise ValidationError("confidence", f"invalid confidence: {confidence!r} (must be a number)", confidence)
    if not 0 <= confidence <= 1:
        raise ValidationError("confidence", f"invalid confidence: {confidence} (must be 0-1)", confidence)


def validate_decision(decision: Decision) -> None:
    validate_decision_fields(decision.outcome_id, decision.confidence)
