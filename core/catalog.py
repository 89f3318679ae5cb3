# =============================================================================
# core/catalog.py  —  Tool Catalog (names, descriptions, argument schemas)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Declares the seven NFT tools as static data:
#     - the name callers use over MCP (camelCase, e.g. "getNFTMetadata")
#     - the human description shown in tools/list
#     - each argument: JSON type, description, required flag, default
#     - the per-tool limit policy (default + cap) where a tool takes `limit`
#
#   ToolSpec.bind() is the structural validator: it checks that required
#   arguments are populated, fills in defaults and clamps `limit`.  It does
#   NOT check address or chain formats; upstream providers reject those.
# =============================================================================

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

from core.chains import DEFAULT_CHAIN, SUPPORTED_CHAINS
from core.errors import ValidationError


@dataclass(frozen=True)
class LimitPolicy:
    """Default and hard cap for a tool's `limit` argument."""

    default: int
    cap: int

    def clamp(self, value: int) -> int:
        return max(1, min(value, self.cap))


@dataclass(frozen=True)
class ArgSpec:
    name: str                          # wire name, camelCase
    type: str                          # JSON schema type: "string" | "number"
    description: str
    required: bool = False
    default: Any = None

    @property
    def param(self) -> str:
        """Python keyword for this argument (contractAddress → contract_address)."""
        return re.sub(r"(?<!^)(?=[A-Z])", "_", self.name).lower()

    def schema(self) -> dict:
        prop = {"type": self.type, "description": self.description}
        if self.default is not None:
            prop["default"] = self.default
        return prop


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    failure_prefix: str                # "Failed to get NFT metadata"
    args: tuple[ArgSpec, ...]
    limit: Optional[LimitPolicy] = None

    @property
    def required(self) -> list[str]:
        return [arg.name for arg in self.args if arg.required]

    def input_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {arg.name: arg.schema() for arg in self.args},
            "required": self.required,
        }

    def descriptor(self) -> dict:
        """The entry this tool contributes to a tools/list response."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }

    def bind(self, arguments: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        """Validate `arguments` and return them as Python keyword arguments.

        Raises:
            ValidationError: a required argument is missing or empty, or a
                number argument is not numeric.
        """
        arguments = arguments or {}
        bound = {}

        for arg in self.args:
            value = arguments.get(arg.name)
            if _is_missing(value):
                if arg.required:
                    raise ValidationError(
                        f"Missing required argument '{arg.name}' for {self.name}"
                    )
                value = arg.default
            elif arg.type == "number":
                value = self._coerce_number(arg, value)
            elif not isinstance(value, str):
                value = str(value)

            if arg.name == "limit" and self.limit is not None and value is not None:
                value = self.limit.clamp(value)

            bound[arg.param] = value

        return bound

    def _coerce_number(self, arg: ArgSpec, value: Any) -> int:
        try:
            return int(float(value))
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                f"Argument '{arg.name}' for {self.name} must be a number, got {value!r}",
                cause=exc,
            ) from exc


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# -----------------------------------------------------------------------------
# Shared argument declarations
# -----------------------------------------------------------------------------
_CHAIN = ArgSpec(
    "chain", "string",
    f"Blockchain network ({', '.join(SUPPORTED_CHAINS)})",
    default=DEFAULT_CHAIN,
)

_CONTRACT = ArgSpec(
    "contractAddress", "string",
    "The contract address of the NFT collection",
    required=True,
)

_OPTIONAL_TOKEN = ArgSpec("tokenId", "string", "Optional: Specific token ID to filter by")


def _limit_arg(policy: LimitPolicy, noun: str) -> ArgSpec:
    return ArgSpec(
        "limit", "number",
        f"Number of {noun} to return (default: {policy.default}, max: {policy.cap})",
        default=policy.default,
    )


# Static limit table.  The cap is what the upstream page size allows.
TOOL_LIMITS: Mapping[str, LimitPolicy] = MappingProxyType({
    "getNFTTransfers": LimitPolicy(default=50, cap=100),
    "getNFTSales": LimitPolicy(default=50, cap=100),
    "getWalletNFTs": LimitPolicy(default=100, cap=100),
    "searchNFTCollections": LimitPolicy(default=20, cap=50),
})


# =============================================================================
# The catalog
# =============================================================================
TOOL_CATALOG: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="getNFTCollectionDetails",
        description=(
            "Get detailed information about an NFT collection including "
            "floor price, volume, and stats"
        ),
        failure_prefix="Failed to get collection details",
        args=(
            ArgSpec(
                "contractAddress", "string",
                "The contract address of the NFT collection "
                "(e.g., 0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D for BAYC)",
                required=True,
            ),
            _CHAIN,
        ),
    ),
    ToolSpec(
        name="getNFTMetadata",
        description="Get metadata and ownership details for a specific NFT token",
        failure_prefix="Failed to get NFT metadata",
        args=(
            _CONTRACT,
            ArgSpec("tokenId", "string", "The token ID of the specific NFT", required=True),
            _CHAIN,
        ),
    ),
    ToolSpec(
        name="getNFTTransfers",
        description=(
            "Get transfer history and transaction data for an NFT collection "
            "or specific token"
        ),
        failure_prefix="Failed to get NFT transfers",
        args=(
            _CONTRACT,
            _OPTIONAL_TOKEN,
            _limit_arg(TOOL_LIMITS["getNFTTransfers"], "transfers"),
            _CHAIN,
        ),
        limit=TOOL_LIMITS["getNFTTransfers"],
    ),
    ToolSpec(
        name="getNFTSales",
        description="Get recent sales data and marketplace activity for NFT collections",
        failure_prefix="Failed to get NFT sales",
        args=(
            _CONTRACT,
            _OPTIONAL_TOKEN,
            ArgSpec(
                "marketplace", "string",
                "Filter by marketplace (opensea, looksrare, blur, x2y2)",
            ),
            _limit_arg(TOOL_LIMITS["getNFTSales"], "sales"),
            _CHAIN,
        ),
        limit=TOOL_LIMITS["getNFTSales"],
    ),
    ToolSpec(
        name="getWalletNFTs",
        description="Get all NFTs owned by a specific wallet address",
        failure_prefix="Failed to get wallet NFTs",
        args=(
            ArgSpec(
                "walletAddress", "string",
                "The wallet address to check for NFT ownership",
                required=True,
            ),
            _CHAIN,
            _limit_arg(TOOL_LIMITS["getWalletNFTs"], "NFTs"),
        ),
        limit=TOOL_LIMITS["getWalletNFTs"],
    ),
    ToolSpec(
        name="getNFTFloorPrice",
        description="Get current floor price and market statistics for an NFT collection",
        failure_prefix="Failed to get floor price",
        args=(
            _CONTRACT,
            ArgSpec(
                "marketplace", "string",
                "Specific marketplace to check (opensea, looksrare, blur)",
                default="opensea",
            ),
            _CHAIN,
        ),
    ),
    ToolSpec(
        name="searchNFTCollections",
        description="Search for NFT collections by name or description",
        failure_prefix="Failed to search collections",
        args=(
            ArgSpec(
                "query", "string",
                "Search term for collection name or description",
                required=True,
            ),
            _limit_arg(TOOL_LIMITS["searchNFTCollections"], "results"),
            _CHAIN,
        ),
        limit=TOOL_LIMITS["searchNFTCollections"],
    ),
)

TOOLS_BY_NAME: Mapping[str, ToolSpec] = MappingProxyType({spec.name: spec for spec in TOOL_CATALOG})
