"""
Four-pass decision pipeline.

Strict, sequential, one reasoning-service call per pass (the citation pass is
local). Any hard failure aborts the run with a PipelineError naming the pass;
a partial decision is never returned.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError as ModelValidationError

from ai_resolver.errors import ParseError, PipelineError, ResolverError
from ai_resolver.models import Decision, Fact, MarketQuestion, WebSource
from ai_resolver.pipeline.models import AnalysisStep, PipelineState
from ai_resolver.pipeline.prompts import (
    CONTRADICTION_CHECK_PROMPT,
    DECIDE_OUTCOME_PROMPT,
    SEARCH_AND_EXTRACT_PROMPT,
)
from ai_resolver.pipeline.reasoning_client import ReasoningClient
from ai_resolver.pipeline.utils import (
    build_citations,
    build_search_query,
    extract_json,
    validate_decision_fields,
)

logger = logging.getLogger(__name__)

SEARCH_TEMPERATURE = 0.3
CONTRADICTION_TEMPERATURE = 0.2
DECISION_TEMPERATURE = 0.4

_STEP_ACTIONS = {
    AnalysisStep.EXTRACT_FACTS: "search and extract facts",
    AnalysisStep.CHECK_CONTRADICTIONS: "check contradictions",
    AnalysisStep.DECIDE_OUTCOME: "decide outcome",
    AnalysisStep.BUILD_CITATIONS: "build citations",
}


def _facts_json(facts: List[Fact]) -> str:
    return json.dumps([f.to_wire() for f in facts], indent=2)


def _load_json(text: str, opener: str = "{") -> Any:
    return json.loads(extract_json(text, opener))


class DecisionPipeline:
    def __init__(self, client: ReasoningClient, clock: Optional[Callable[[], float]] = None):
        self.client = client
        self._clock = clock or time.time

    async def run(self, question: MarketQuestion) -> Decision:
        """
        Resolve one market question.

        Raises:
            PipelineError: a pass failed; `err.step` names it and the cause is chained.
        """
        state = PipelineState(question=question)
        logger.info(f"[pipeline] Analyzing market {question.market_id}: {question.question}")
        try:
            state.step = AnalysisStep.EXTRACT_FACTS
            state.facts, state.sources = await self.search_and_extract(question, build_search_query(question))
            logger.info(f"[pipeline] S1: {len(state.facts)} facts, {len(state.sources)} sources")

            state.step = AnalysisStep.CHECK_CONTRADICTIONS
            state.facts = await self.check_contradictions(question, state.facts)
            flagged = sum(1 for f in state.facts if f.contradicts)
            logger.info(f"[pipeline] S2: {flagged} contradictory facts")

            state.step = AnalysisStep.DECIDE_OUTCOME
            state.decision = await self.decide_outcome(question, state.facts)
            logger.info(
                f"[pipeline] S3: outcome={state.decision.outcome_id} confidence={state.decision.confidence:.2f}"
            )

            state.step = AnalysisStep.BUILD_CITATIONS
            state.citations = build_citations(state.sources, state.facts)
        except ResolverError as e:
            action = _STEP_ACTIONS[state.step]
            logger.warning(f"[pipeline] Failed to {action}: {e}")
            raise PipelineError(state.step.value, f"failed to {action}: {e}") from e

        state.decision.citations = state.citations
        state.decision.timestamp = int(self._clock())
        return state.decision

    async def search_and_extract(self, question: MarketQuestion, search_query: str) -> Tuple[List[Fact], List[WebSource]]:
        prompt = SEARCH_AND_EXTRACT_PROMPT.format(
            question=question.question,
            description=question.description,
            category=question.category,
            search_query=search_query,
        )
        response = await self.client.complete(prompt, web_search=True, temperature=SEARCH_TEMPERATURE)

        try:
            payload = _load_json(response)
            if not isinstance(payload, dict):
                raise ValueError("expected a JSON object")
            facts = [Fact.model_validate(f) for f in payload.get("facts") or []]
            sources = [WebSource.model_validate(s) for s in payload.get("sources") or []]
        except (ValueError, TypeError, ModelValidationError) as e:
            raise ParseError(f"failed to parse facts JSON: {e}", raw=response) from e
        return facts, sources

    async def check_contradictions(self, question: MarketQuestion, facts: List[Fact]) -> List[Fact]:
        """Flag contradictory facts. An unparseable answer keeps the facts unchanged."""
        if not facts:
            return facts

        prompt = CONTRADICTION_CHECK_PROMPT.format(question=question.question, facts_json=_facts_json(facts))
        response = await self.client.complete(prompt, web_search=False, temperature=CONTRADICTION_TEMPERATURE)

        try:
            payload = _load_json(response, "[")
            if not isinstance(payload, list):
                raise ValueError("expected a JSON array")
            return [Fact.model_validate(f) for f in payload]
        except (ValueError, TypeError, ModelValidationError) as e:
            logger.warning(f"[pipeline] Contradiction check unparseable, keeping original facts: {e}")
            return facts

    async def decide_outcome(self, question: MarketQuestion, facts: List[Fact]) -> Decision:
        prompt = DECIDE_OUTCOME_PROMPT.format(
            question=question.question,
            description=question.description,
            facts_json=_facts_json(facts),
        )
        response = await self.client.complete(prompt, web_search=False, temperature=DECISION_TEMPERATURE)

        try:
            payload = _load_json(response)
            if not isinstance(payload, dict):
                raise ValueError("expected a JSON object")
            missing = [k for k in ("outcomeId", "confidence") if k not in payload]
            if missing:
                raise ValueError(f"missing field(s): {', '.join(missing)}")
        except ValueError as e:
            raise ParseError(f"failed to parse decision JSON: {e}", raw=response) from e

        validate_decision_fields(payload["outcomeId"], payload["confidence"])
        try:
            decision = Decision(
                outcome_id=payload["outcomeId"],
                confidence=payload["confidence"],
                reasoning=payload.get("reasoning") or "",
                facts=facts,
            )
        except (ValueError, TypeError, ModelValidationError) as e:
            raise ParseError(f"failed to parse decision JSON: {e}", raw=response) from e

        return decision
