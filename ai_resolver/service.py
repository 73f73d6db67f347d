"""
Resolver service: question in, signed proposal out.

Runs the decision pipeline under the proposal timeout, takes "now" from the
chain clock when one is configured (block time is what the adapter checks
notBefore/deadline against), then builds and signs the proposal. Bonding and
submitting the transaction is left to the chain collaborator.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from ai_resolver.errors import ResolverError
from ai_resolver.models import Decision, MarketQuestion
from ai_resolver.pipeline.decision_pipeline import DecisionPipeline
from ai_resolver.signing.attestation import DEFAULT_VALIDITY, SignedAttestation, sign_attestation
from ai_resolver.signing.eip712 import PrivateKeyLike, Signer, address_of, parse_private_key

logger = logging.getLogger(__name__)


class ChainClock(Protocol):
    async def current_block_timestamp(self) -> int: ...


class ProposalTimeoutError(ResolverError, TimeoutError):
    pass


@dataclass
class ProposalResult:
    decision: Decision
    attestation: SignedAttestation

    def to_wire(self) -> Dict[str, Any]:
        return {"decision": self.decision.to_wire(), **self.attestation.to_wire()}


class ResolverService:
    def __init__(
        self,
        pipeline: DecisionPipeline,
        signer: Signer,
        private_key: PrivateKeyLike,
        clock: Optional[ChainClock] = None,
        proposal_timeout: float = 300.0,
        validity: int = DEFAULT_VALIDITY,
    ):
        self.pipeline = pipeline
        self.signer = signer
        self._private_key = parse_private_key(private_key)
        self.signer_address = address_of(self._private_key)
        self.clock = clock
        self.proposal_timeout = proposal_timeout
        self.validity = validity

    async def _now(self) -> int:
        if self.clock is not None:
            return int(await self.clock.current_block_timestamp())
        return int(time.time())

    async def propose(self, question: MarketQuestion) -> ProposalResult:
        """
        Resolve a market and sign the resulting proposal.

        Raises:
            ProposalTimeoutError: the pipeline did not finish within proposal_timeout
            PipelineError: a pipeline pass failed
        """
        logger.info(f"[service] Processing proposal for market {question.market_id}")
        try:
            async with asyncio.timeout(self.proposal_timeout):
                decision = await self.pipeline.run(question)
                now = await self._now()
        except TimeoutError as e:
            raise ProposalTimeoutError(
                f"proposal for market {question.market_id} timed out after {self.proposal_timeout}s"
            ) from e

        attestation = sign_attestation(
            self.signer, self._private_key, question, decision, now=now, validity=self.validity
        )
        logger.info(
            f"[service] Signed proposal market={question.market_id} outcome={decision.outcome_id} "
            f"evidence={len(attestation.evidence_uris)} deadline={attestation.proposal.deadline}"
        )
        return ProposalResult(decision=decision, attestation=attestation)
