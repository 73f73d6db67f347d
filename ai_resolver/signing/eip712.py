"""
EIP-712 typed-data signing for outcome proposals.

    digest = keccak256(0x19 0x01 || domainSeparator || structHash)

The on-chain adapter recomputes the same digest, so the type strings, the
field order and the 32-byte word encoding below must not change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from eth_hash.auto import keccak
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import to_canonical_address, to_checksum_address

from ai_resolver.errors import SignatureError

DOMAIN_NAME = "AIOracleAdapter"
DOMAIN_VERSION = "1"

EIP712_DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
PROPOSED_OUTCOME_TYPE = (
    "ProposedOutcome(uint256 marketId,uint256 outcomeId,uint256 closeTime,"
    "bytes32 evidenceHash,uint256 notBefore,uint256 deadline)"
)

EIP712_DOMAIN_TYPEHASH = keccak(EIP712_DOMAIN_TYPE.encode())
PROPOSED_OUTCOME_TYPEHASH = keccak(PROPOSED_OUTCOME_TYPE.encode())

UINT256_MAX = 2**256 - 1
SIGNATURE_LENGTH = 65

PrivateKeyLike = Union[keys.PrivateKey, bytes, str]


def pad32(value: int) -> bytes:
    """Big-endian uint256 word."""
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"value out of uint256 range: {value}")
    return value.to_bytes(32, "big")


def _address_word(address: Union[str, bytes]) -> bytes:
    return b"\x00" * 12 + to_canonical_address(address)


@dataclass(frozen=True)
class Domain:
    chain_id: int
    verifying_contract: str
    name: str = DOMAIN_NAME
    version: str = DOMAIN_VERSION

    def separator(self) -> bytes:
        return keccak(
            EIP712_DOMAIN_TYPEHASH
            + keccak(self.name.encode())
            + keccak(self.version.encode())
            + pad32(self.chain_id)
            + _address_word(self.verifying_contract)
        )


@dataclass(frozen=True)
class Proposal:
    market_id: int
    outcome_id: int
    close_time: int
    evidence_hash: bytes
    not_before: int
    deadline: int

    def __post_init__(self):
        for name in ("market_id", "outcome_id", "close_time", "not_before", "deadline"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= UINT256_MAX:
                raise ValueError(f"{name} must be a uint256, got {value!r}")
        if not isinstance(self.evidence_hash, bytes) or len(self.evidence_hash) != 32:
            raise ValueError("evidence_hash must be exactly 32 bytes")

    def struct_hash(self) -> bytes:
        return keccak(
            PROPOSED_OUTCOME_TYPEHASH
            + pad32(self.market_id)
            + pad32(self.outcome_id)
            + pad32(self.close_time)
            + self.evidence_hash
            + pad32(self.not_before)
            + pad32(self.deadline)
        )


def typed_data_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    return keccak(b"\x19\x01" + domain_separator + struct_hash)


def parse_private_key(value: PrivateKeyLike) -> keys.PrivateKey:
    """Accept a PrivateKey, 32 raw bytes or a hex string (0x prefix optional)."""
    if isinstance(value, keys.PrivateKey):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        try:
            value = bytes.fromhex(text)
        except ValueError as e:
            raise SignatureError(f"invalid private key hex: {e}") from e
    if len(value) != 32:
        raise SignatureError(f"private key must be 32 bytes, got {len(value)}")
    try:
        return keys.PrivateKey(value)
    except KeyValidationError as e:
        raise SignatureError(f"invalid private key: {e}") from e


def address_of(private_key: PrivateKeyLike) -> str:
    """Checksummed address controlled by the key."""
    return parse_private_key(private_key).public_key.to_checksum_address()


def recover_address(digest: bytes, signature: bytes) -> str:
    """
    Recover the signer's checksummed address from a 65-byte r||s||v signature.
    v may be 0/1 or 27/28.
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise SignatureError(f"invalid signature length: {len(signature)}")
    sig = bytearray(signature)
    if sig[64] >= 27:
        sig[64] -= 27
    try:
        public_key = keys.Signature(signature_bytes=bytes(sig)).recover_public_key_from_msg_hash(digest)
    except (BadSignature, KeyValidationError) as e:
        raise SignatureError(f"failed to recover public key: {e}") from e
    return public_key.to_checksum_address()


class Signer:
    """Signs and verifies ProposedOutcome messages for one domain."""

    def __init__(self, chain_id: int, verifying_contract: str):
        self.domain = Domain(chain_id=chain_id, verifying_contract=to_checksum_address(verifying_contract))
        self._domain_separator = self.domain.separator()

    @property
    def domain_separator(self) -> bytes:
        return self._domain_separator

    def digest(self, proposal: Proposal) -> bytes:
        return typed_data_digest(self._domain_separator, proposal.struct_hash())

    def sign(self, proposal: Proposal, private_key: PrivateKeyLike) -> bytes:
        """
        Sign a proposal.

        Returns:
            65 bytes r||s||v with v in {27, 28}.
        """
        key = parse_private_key(private_key)
        raw = bytearray(key.sign_msg_hash(self.digest(proposal)).to_bytes())
        raw[64] += 27
        return bytes(raw)

    def verify(self, proposal: Proposal, signature: bytes, expected_signer: str) -> bool:
        """
        True if `signature` over the proposal was made by `expected_signer`.

        Raises:
            SignatureError: the signature is not 65 bytes or cannot be recovered.
        """
        recovered = recover_address(self.digest(proposal), signature)
        return to_canonical_address(recovered) == to_canonical_address(expected_signer)


def encode_string_array(values: Sequence[str]) -> bytes:
    """
    ABI-encode a dynamic string[] (as abi.encode(string[]) does).

    Layout: offset word (32), element count, one offset per element relative
    to the start of the offset table, then each element as length word plus
    UTF-8 bytes right-padded to a multiple of 32.
    """
    encoded = [v.encode("utf-8") for v in values]
    offsets = []
    tails = []
    offset = 32 * len(encoded)
    for data in encoded:
        offsets.append(pad32(offset))
        padded = data.ljust((len(data) + 31) // 32 * 32, b"\x00")
        tail = pad32(len(data)) + padded
        tails.append(tail)
        offset += len(tail)
    return pad32(32) + pad32(len(encoded)) + b"".join(offsets) + b"".join(tails)


def compute_evidence_hash(evidence_uris: Sequence[str]) -> bytes:
    """keccak256 of the ABI-encoded string[] of evidence URIs. Order matters."""
    return keccak(encode_string_array(evidence_uris))
