"""
HTTP API for the resolver.

    GET  /healthz, /v1/healthz   liveness + signer identity
    GET  /v1/tools               tool catalogue in the Responses API format
    POST /v1/propose             resolve a market and return the signed proposal
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import Field

from ai_resolver import __version__
from ai_resolver.agent.builtins import default_registry
from ai_resolver.agent.metrics import MetricsCollector
from ai_resolver.agent.tool_registry import ToolRegistry
from ai_resolver.config import Settings
from ai_resolver.errors import PipelineError, ResolverError
from ai_resolver.logging_config import setup_logging
from ai_resolver.models import MarketQuestion, WireModel
from ai_resolver.pipeline.decision_pipeline import DecisionPipeline
from ai_resolver.pipeline.reasoning_client import OpenAIReasoningClient
from ai_resolver.service import ProposalTimeoutError, ResolverService
from ai_resolver.signing.eip712 import Signer

logger = logging.getLogger(__name__)


class ProposeRequest(WireModel):
    market_id: int = Field(ge=0)
    question: str = Field(min_length=1)
    description: str = ""
    category: str = ""
    close_time: int = Field(ge=0)
    metadata_uri: str = ""
    outcome_count: int = 2

    def to_question(self) -> MarketQuestion:
        return MarketQuestion(**self.model_dump())


def build_service(settings: Settings, registry: ToolRegistry) -> ResolverService:
    client = OpenAIReasoningClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        registry=registry,
    )
    return ResolverService(
        pipeline=DecisionPipeline(client),
        signer=Signer(settings.chain_id, settings.adapter_address),
        private_key=settings.signer_private_key,
        proposal_timeout=settings.proposal_timeout,
        validity=settings.proposal_validity,
    )


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[ResolverService] = None,
    registry: Optional[ToolRegistry] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.registry is None:
            app.state.metrics = MetricsCollector()
            app.state.registry = default_registry(metrics=app.state.metrics, tool_timeout=settings.tool_timeout)
        if app.state.service is None:
            settings.validate()
            app.state.service = build_service(settings, app.state.registry)
        logger.info(
            f"[main] Resolver ready: chain_id={settings.chain_id} signer={app.state.service.signer_address} "
            f"tools={app.state.registry.names()}"
        )
        yield

    app = FastAPI(title="AI Resolver", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.service = service
    app.state.registry = registry
    app.state.metrics = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def health(request: Request) -> dict:
        service = request.app.state.service
        return {
            "status": "ok",
            "version": __version__,
            "time": int(time.time()),
            "signer": service.signer_address if service else None,
            "chainId": settings.chain_id,
        }

    app.add_api_route("/healthz", health, methods=["GET"])
    app.add_api_route("/v1/healthz", health, methods=["GET"])

    @app.get("/v1/tools")
    def list_tools(request: Request) -> dict:
        registry = request.app.state.registry
        tools = registry.to_openai_spec() if registry is not None else []
        metrics = request.app.state.metrics
        return {"tools": tools, "metrics": metrics.snapshot() if metrics else {}}

    @app.post("/v1/propose")
    async def propose(body: ProposeRequest, request: Request) -> dict:
        service: ResolverService = request.app.state.service
        try:
            result = await service.propose(body.to_question())
        except ProposalTimeoutError as e:
            raise HTTPException(status_code=504, detail=str(e))
        except PipelineError as e:
            logger.warning(f"[main] Proposal for market {body.market_id} failed at {e.step}: {e}")
            raise HTTPException(status_code=502, detail=str(e))
        except (ResolverError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        return result.to_wire()

    return app


def run() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    run()
