"""
get_market_data tool

Reads a market's on-chain record through a MarketDataClient. The client is
the chain collaborator (RPC + contract bindings) and lives outside this
package; anything with an async `get_market` works.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol

from eth_utils import to_checksum_address

from ai_resolver.agent.tools.base import Tool
from ai_resolver.agent.tools.types import ToolInput, ToolOutput
from ai_resolver.errors import ExecutionError


@dataclass
class MarketRecord:
    market_id: int
    creator: str
    amm: str
    collateral_token: str
    close_time: int
    category: str = ""
    metadata_uri: str = ""
    creator_stake: int = 0
    stake_refunded: bool = False
    status: int = 0


class MarketDataClient(Protocol):
    async def get_market(self, market_id: int) -> MarketRecord: ...


class MarketDataTool(Tool):
    name = "get_market_data"
    description = (
        "Fetches detailed information about a prediction market from the blockchain, "
        "including creator, category, close time, and current status."
    )
    input_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "market_id": {
                "type": "string",
                "description": "The ID of the market to fetch (as a decimal string)",
            },
        },
        "required": ["market_id"],
    }

    def __init__(self, client: MarketDataClient):
        super().__init__()
        self._client = client

    async def run(self, tool_input: ToolInput) -> ToolOutput:
        raw_id = (tool_input.arguments or {}).get("market_id")
        if not isinstance(raw_id, str):
            raise ExecutionError("market_id must be a string")
        if not raw_id.isdigit():
            raise ExecutionError(f"invalid market_id format: {raw_id}")

        try:
            market = await self._client.get_market(int(raw_id))
        except Exception as e:
            raise ExecutionError(f"failed to fetch market data: {e}") from e

        return ToolOutput(
            data={
                "market_id": str(market.market_id),
                "creator": to_checksum_address(market.creator),
                "amm": to_checksum_address(market.amm),
                "collateral_token": to_checksum_address(market.collateral_token),
                "close_time": market.close_time,
                "category": market.category,
                "metadata_uri": market.metadata_uri,
                "creator_stake": str(market.creator_stake),
                "stake_refunded": market.stake_refunded,
                "status": market.status,
            }
        )
