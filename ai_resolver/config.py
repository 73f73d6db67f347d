"""
Configuration loaded from the environment (and a .env file when present).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from eth_utils import is_address

from ai_resolver.errors import ConfigError


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _duration(name: str, default: float) -> float:
    """Seconds, optionally with an s/m/h suffix (e.g. "300", "5m")."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    raw = raw.strip().lower()
    scale = {"s": 1, "m": 60, "h": 3600}.get(raw[-1])
    try:
        return float(raw[:-1]) * scale if scale else float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a duration like 300, 30s or 5m, got {raw!r}") from e


@dataclass
class Settings:
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    chain_id: int = 56
    rpc_endpoint: str = ""
    adapter_address: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4-turbo-preview"
    openai_base_url: str = "https://api.openai.com/v1"
    signer_private_key: str = ""
    proposal_timeout: float = 300.0
    proposal_validity: int = 7200
    tool_timeout: float = 30.0
    log_level: str = "info"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(env_file)
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            server_host=os.getenv("SERVER_HOST", "0.0.0.0"),
            server_port=_int("SERVER_PORT", 8080),
            chain_id=_int("CHAIN_ID", 56),
            rpc_endpoint=os.getenv("RPC_ENDPOINT", ""),
            adapter_address=os.getenv("AI_ORACLE_ADAPTER_ADDR", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4-turbo-preview"),
            openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
            signer_private_key=os.getenv("SIGNER_PRIVATE_KEY", ""),
            proposal_timeout=_duration("PROPOSAL_TIMEOUT", 300.0),
            proposal_validity=_int("PROPOSAL_VALIDITY", 7200),
            tool_timeout=_duration("TOOL_TIMEOUT", 30.0),
            log_level=os.getenv("LOG_LEVEL", "info"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )

    def validate(self) -> None:
        missing = [
            env
            for env, value in (
                ("OPENAI_API_KEY", self.openai_api_key),
                ("AI_ORACLE_ADAPTER_ADDR", self.adapter_address),
                ("SIGNER_PRIVATE_KEY", self.signer_private_key),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"missing required configuration: {', '.join(missing)}")
        if not is_address(self.adapter_address):
            raise ConfigError(f"AI_ORACLE_ADAPTER_ADDR is not a valid address: {self.adapter_address}")
        if self.chain_id <= 0:
            raise ConfigError("CHAIN_ID must be positive")
        if self.proposal_validity <= 0:
            raise ConfigError("PROPOSAL_VALIDITY must be positive")
