"""
Turn a Decision into a signed, time-bounded ProposedOutcome.

Evidence URIs are the decision's citation URLs in citation order; the proposal
is valid from `now` until `now + validity`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ai_resolver.models import Decision, MarketQuestion
from ai_resolver.signing.eip712 import PrivateKeyLike, Proposal, Signer, address_of, compute_evidence_hash

DEFAULT_VALIDITY = 7200


def evidence_uris(decision: Decision) -> List[str]:
    return [c.url for c in decision.citations]


def build_proposal(question: MarketQuestion, decision: Decision, now: int, validity: int = DEFAULT_VALIDITY) -> Proposal:
    return Proposal(
        market_id=question.market_id,
        outcome_id=decision.outcome_id,
        close_time=question.close_time,
        evidence_hash=compute_evidence_hash(evidence_uris(decision)),
        not_before=now,
        deadline=now + validity,
    )


@dataclass
class SignedAttestation:
    proposal: Proposal
    signature: bytes
    digest: bytes
    signer: str
    evidence_uris: List[str] = field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        p = self.proposal
        return {
            "proposal": {
                "marketId": p.market_id,
                "outcomeId": p.outcome_id,
                "closeTime": p.close_time,
                "evidenceHash": "0x" + p.evidence_hash.hex(),
                "notBefore": p.not_before,
                "deadline": p.deadline,
            },
            "signature": "0x" + self.signature.hex(),
            "digest": "0x" + self.digest.hex(),
            "signer": self.signer,
            "evidenceURIs": list(self.evidence_uris),
        }


def sign_attestation(
    signer: Signer,
    private_key: PrivateKeyLike,
    question: MarketQuestion,
    decision: Decision,
    now: int,
    validity: int = DEFAULT_VALIDITY,
) -> SignedAttestation:
    proposal = build_proposal(question, decision, now, validity)
    return SignedAttestation(
        proposal=proposal,
        signature=signer.sign(proposal, private_key),
        digest=signer.digest(proposal),
        signer=address_of(private_key),
        evidence_uris=evidence_uris(decision),
    )
