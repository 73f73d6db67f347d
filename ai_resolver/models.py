"""
Shared wire models.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON the reasoning service and the HTTP API exchange.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class MarketQuestion(WireModel):
    market_id: int = Field(ge=0)
    question: str
    description: str = ""
    category: str = ""
    close_time: int = Field(ge=0)
    metadata_uri: str = ""
    outcome_count: int = 2


class Fact(WireModel):
    statement: str
    sources: List[str] = Field(default_factory=list)
    confidence: float = 0.0
    contradicts: bool = False
    supporting_evidence: str = ""


class WebSource(WireModel):
    url: str
    title: str = ""
    snippet: str = ""


class Citation(WireModel):
    url: str
    title: str = ""
    snippet: str = ""
    weight: float = 0.0


class Decision(WireModel):
    outcome_id: StrictInt
    confidence: float = Field(strict=True)
    reasoning: str = ""
    facts: List[Fact] = Field(default_factory=list)
    citations: List[Citation] = Field(default_factory=list)
    timestamp: Optional[int] = None
