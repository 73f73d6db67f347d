"""Shared fixtures: a scripted reasoning service, a sample market and signing keys."""
import json
from typing import List

import pytest

from ai_resolver.models import MarketQuestion

# Well-known test key and its address.
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"
ADAPTER_ADDRESS = "0x1234567890123456789012345678901234567890"


class ScriptedReasoningClient:
    """Returns canned responses in order and records every call."""

    def __init__(self, responses: List[str]):
        self.responses = list(responses)
        self.calls = []

    async def complete(self, prompt, *, web_search, temperature):
        self.calls.append({"prompt": prompt, "web_search": web_search, "temperature": temperature})
        if not self.responses:
            raise AssertionError("no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def search_response(facts=None, sources=None, prose=True):
    body = json.dumps({"facts": facts or [], "sources": sources or []})
    return f"Here is what I found:\n```json\n{body}\n```" if prose else body


def decision_response(outcome_id=1, confidence=0.9, reasoning="Evidence supports YES"):
    return json.dumps({"outcomeId": outcome_id, "confidence": confidence, "reasoning": reasoning, "facts": []})


@pytest.fixture
def market_question():
    return MarketQuestion(
        market_id=42,
        question="Will BTC close above $100k on 2025-01-31?",
        description="Resolves YES if the daily close on Coinbase is above $100,000.",
        category="crypto",
        close_time=1738368000,
    )


@pytest.fixture
def sample_facts():
    return [
        {
            "statement": "BTC closed at $102,400 on 2025-01-31",
            "sources": ["https://a.example/btc", "https://b.example/close"],
            "confidence": 0.9,
            "supportingEvidence": "Daily close of 102,400 USD",
        },
        {
            "statement": "Coinbase reported a close above 100k",
            "sources": ["https://a.example/btc"],
            "confidence": 0.6,
            "supportingEvidence": "Coinbase daily candle",
        },
    ]


@pytest.fixture
def sample_sources():
    return [
        {"url": "https://a.example/btc", "title": "A", "snippet": "a"},
        {"url": "https://b.example/close", "title": "B", "snippet": "b"},
        {"url": "https://c.example/unused", "title": "C", "snippet": "c"},
    ]
