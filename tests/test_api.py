"""Tests for the HTTP API using FastAPI's TestClient."""
import json

import pytest
from fastapi.testclient import TestClient

from ai_resolver.agent.builtins import default_registry
from ai_resolver.config import Settings
from ai_resolver.errors import ConfigError
from ai_resolver.main import create_app
from ai_resolver.pipeline.decision_pipeline import DecisionPipeline
from ai_resolver.service import ResolverService
from ai_resolver.signing.eip712 import Signer
from tests.conftest import (
    ADAPTER_ADDRESS,
    TEST_ADDRESS,
    TEST_PRIVATE_KEY,
    ScriptedReasoningClient,
    decision_response,
    search_response,
)

PROPOSE_BODY = {
    "marketId": 42,
    "question": "Will BTC close above $100k on 2025-01-31?",
    "description": "Coinbase daily close",
    "category": "crypto",
    "closeTime": 1738368000,
}


def _settings():
    return Settings(
        chain_id=56,
        adapter_address=ADAPTER_ADDRESS,
        openai_api_key="sk-test",
        signer_private_key=TEST_PRIVATE_KEY,
    )


def _app(responses):
    service = ResolverService(
        pipeline=DecisionPipeline(ScriptedReasoningClient(responses)),
        signer=Signer(56, ADAPTER_ADDRESS),
        private_key=TEST_PRIVATE_KEY,
    )
    return create_app(_settings(), service=service, registry=default_registry())


@pytest.fixture
def happy_client(sample_facts, sample_sources):
    app = _app([search_response(sample_facts, sample_sources), json.dumps(sample_facts), decision_response(1, 0.9)])
    with TestClient(app) as client:
        yield client


class TestHealth:
    @pytest.mark.parametrize("path", ["/healthz", "/v1/healthz"])
    def test_health(self, happy_client, path):
        response = happy_client.get(path)
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["version"] == "1.0.0"
        assert body["signer"] == TEST_ADDRESS
        assert body["chainId"] == 56


def test_tools_catalogue(happy_client):
    tools = happy_client.get("/v1/tools").json()["tools"]
    assert {"type": "web_search_preview"} in tools
    assert {t.get("name") for t in tools} >= {"calculate", "datetime"}


class TestPropose:
    def test_propose(self, happy_client):
        response = happy_client.post("/v1/propose", json=PROPOSE_BODY)
        assert response.status_code == 200
        body = response.json()
        assert body["decision"]["outcomeId"] == 1
        assert body["proposal"]["marketId"] == 42
        assert body["proposal"]["deadline"] - body["proposal"]["notBefore"] == 7200
        assert body["signer"] == TEST_ADDRESS
        assert len(body["evidenceURIs"]) == 2

    def test_invalid_body(self, happy_client):
        response = happy_client.post("/v1/propose", json={"question": "missing ids"})
        assert response.status_code == 422

    def test_pipeline_failure_is_502(self):
        with TestClient(_app(["not json"])) as client:
            response = client.post("/v1/propose", json=PROPOSE_BODY)
        assert response.status_code == 502
        assert "extract" in response.json()["detail"]


def test_cors_headers(happy_client):
    response = happy_client.options(
        "/v1/healthz",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers


class TestSettings:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CHAIN_ID", "97")
        monkeypatch.setenv("PROPOSAL_TIMEOUT", "5m")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-test")
        settings = Settings.from_env(env_file="/nonexistent/.env")
        assert settings.chain_id == 97
        assert settings.proposal_timeout == 300.0
        assert settings.openai_model == "gpt-test"

    def test_validate_reports_missing(self):
        with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
            Settings().validate()

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "eighty")
        with pytest.raises(ConfigError):
            Settings.from_env(env_file="/nonexistent/.env")
