from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ai_resolver.models import Citation, Decision, Fact, MarketQuestion, WebSource


class AnalysisStep(str, Enum):
    EXTRACT_FACTS = "extract_facts"
    CHECK_CONTRADICTIONS = "check_contradictions"
    DECIDE_OUTCOME = "decide_outcome"
    BUILD_CITATIONS = "build_citations"


@dataclass
class PipelineState:
    question: MarketQuestion
    step: Optional[AnalysisStep] = None
    facts: List[Fact] = field(default_factory=list)
    sources: List[WebSource] = field(default_factory=list)
    decision: Optional[Decision] = None
    citations: List[Citation] = field(default_factory=list)
