# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL seven NFT tools)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes the NFT tools over MCP.  Each tool is a thin wrapper that
#   forwards its arguments to core.dispatcher.ToolDispatcher, which validates,
#   calls the providers and reshapes the result.
#
# HOW IT WORKS (the flow):
#   1. An MCP client sends tools/call {"name": "getNFTMetadata", ...}
#   2. DispatchMiddleware checks the name and arguments with the dispatcher
#   3. FastMCP routes the call to the decorated function below
#   4. The function hands the arguments to ToolDispatcher.call_tool()
#   5. The dispatcher returns a dict; FastMCP sends it back as JSON
#   Failures leave as JSON-RPC errors with the NFTScannerError code.
#
# TOOL NAMES:
#   Wire names are camelCase ("getNFTCollectionDetails") and so are the
#   argument names, because they ARE the protocol contract.  Descriptions
#   come from core/catalog.py so tools/list and the dispatcher agree.
#
# RUNNING THIS SERVER:
#     a) python -m tools.mcp_server
#     b) nft-scanner-mcp            (console script from pyproject.toml)
#   Either way it speaks MCP on stdin/stdout.
# =============================================================================

import json
import logging
import sys
from typing import Any, Optional, Union

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from mcp.shared.exceptions import MCPError

from core.alchemy import AlchemyClient
from core.catalog import TOOL_LIMITS, TOOLS_BY_NAME
from core.chains import DEFAULT_CHAIN
from core.config import Settings
from core.dispatcher import ToolDispatcher
from core.errors import NFTScannerError
from core.executor import RequestExecutor
from core.opensea import OpenSeaClient

SERVER_NAME = "nft-scanner-mcp"

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR.  STDOUT carries the MCP JSON stream and a stray log
# line there would corrupt it.
#
# ANSI colours:
#   CYAN    incoming tool calls (name + arguments)
#   GREEN   response summaries (full JSON at DEBUG)
#   YELLOW  status / degraded-provider messages
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses (summary; full JSON at DEBUG)
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"     # Reset to default terminal color

logger = logging.getLogger(SERVER_NAME)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log a one-line summary in GREEN; the full JSON only at DEBUG."""
    counts = ", ".join(
        f"{key}={len(value)}" for key, value in result.items() if isinstance(value, list)
    )
    logger.info(
        f"{_GREEN}  ← {tool_name} response from {result.get('dataSource', '?')}"
        f"{' (' + counts + ')' if counts else ''}{_RESET}"
    )
    logger.debug(f"  ← {tool_name} body: {json.dumps(result, separators=(',', ':'))}")
    return result


# =============================================================================
# Error mapping
# =============================================================================
# FastMCP turns a ToolError into an isError result and drops the code.  The
# middleware below runs before tool lookup, so unknown names and bad
# arguments are rejected by the dispatcher itself, and every NFTScannerError
# leaves as a JSON-RPC error carrying its own code:
#   ProtocolError       -32601
#   ValidationError     -32602
#   everything else     -32603
# =============================================================================
def _as_mcp_error(exc: NFTScannerError) -> MCPError:
    return MCPError(
        code=exc.code,
        message=f"NFT Scanner error: {exc}",
        data={"kind": exc.kind.value},
    )


class DispatchMiddleware(Middleware):
    """Validate tools/call against the dispatcher and keep error codes intact."""

    def __init__(self, dispatcher: ToolDispatcher):
        self._dispatcher = dispatcher

    async def on_call_tool(self, context: MiddlewareContext, call_next: CallNext):
        tool_name = context.message.name
        arguments = context.message.arguments or {}
        _log_request(tool_name, **arguments)

        try:
            self._dispatcher.validate(tool_name, arguments)
        except NFTScannerError as exc:
            _log_status(f"{tool_name} rejected ({exc.kind.value}): {exc}")
            raise _as_mcp_error(exc) from exc

        try:
            return await call_next(context)
        except ToolError as exc:
            if isinstance(exc.__cause__, NFTScannerError):
                raise _as_mcp_error(exc.__cause__) from exc.__cause__
            raise


# =============================================================================
# Wiring
# =============================================================================
def build_dispatcher(settings: Settings, executor: Optional[RequestExecutor] = None) -> ToolDispatcher:
    """Construct the executor, both provider clients and the dispatcher."""
    executor = executor or RequestExecutor.from_settings(settings)
    return ToolDispatcher(
        alchemy=AlchemyClient(settings, executor),
        opensea=OpenSeaClient(settings, executor),
    )


def _describe(tool_name: str) -> str:
    return TOOLS_BY_NAME[tool_name].description


def create_server(dispatcher: ToolDispatcher) -> FastMCP:
    """Create the FastMCP server with all seven tools bound to `dispatcher`."""
    mcp = FastMCP(SERVER_NAME, middleware=[DispatchMiddleware(dispatcher)])

    def _call(tool_name: str, **arguments: Any) -> dict:
        # Optional arguments left unset arrive as None; the dispatcher
        # treats absent keys as "use the default".
        arguments = {k: v for k, v in arguments.items() if v is not None}
        try:
            result = dispatcher.call_tool(tool_name, arguments)
        except NFTScannerError as exc:
            _log_status(f"{tool_name} failed ({exc.kind.value}): {exc}")
            raise ToolError(f"NFT Scanner error: {exc}") from exc
        return _log_response(tool_name, result)

    # =========================================================================
    # TOOL 1: getNFTCollectionDetails
    # =========================================================================
    @mcp.tool(name="getNFTCollectionDetails", description=_describe("getNFTCollectionDetails"))
    def get_collection_details(contractAddress: str, chain: str = DEFAULT_CHAIN) -> dict:
        """Collection identity (Alchemy) merged with market stats (OpenSea).

        Returns collectionDetails with name, supply, verified flag,
        marketStats, social links and royalties.  If OpenSea is down the
        market fields come back null instead of failing the call.
        """
        return _call("getNFTCollectionDetails", contractAddress=contractAddress, chain=chain)

    # =========================================================================
    # TOOL 2: getNFTMetadata
    # =========================================================================
    @mcp.tool(name="getNFTMetadata", description=_describe("getNFTMetadata"))
    def get_nft_metadata(contractAddress: str, tokenId: Union[str, int], chain: str = DEFAULT_CHAIN) -> dict:
        """Metadata, attributes and current owner of one token."""
        return _call("getNFTMetadata", contractAddress=contractAddress, tokenId=tokenId, chain=chain)

    # =========================================================================
    # TOOL 3: getNFTTransfers
    # =========================================================================
    @mcp.tool(name="getNFTTransfers", description=_describe("getNFTTransfers"))
    def get_nft_transfers(
        contractAddress: str,
        tokenId: Optional[Union[str, int]] = None,
        limit: int = TOOL_LIMITS["getNFTTransfers"].default,
        chain: str = DEFAULT_CHAIN,
    ) -> dict:
        """Newest-first transfer history for a collection or one token."""
        return _call(
            "getNFTTransfers",
            contractAddress=contractAddress, tokenId=tokenId, limit=limit, chain=chain,
        )

    # =========================================================================
    # TOOL 4: getNFTSales
    # =========================================================================
    @mcp.tool(name="getNFTSales", description=_describe("getNFTSales"))
    def get_nft_sales(
        contractAddress: str,
        tokenId: Optional[Union[str, int]] = None,
        marketplace: Optional[str] = None,
        limit: int = TOOL_LIMITS["getNFTSales"].default,
        chain: str = DEFAULT_CHAIN,
    ) -> dict:
        """Recent successful sales from the OpenSea events feed."""
        return _call(
            "getNFTSales",
            contractAddress=contractAddress, tokenId=tokenId,
            marketplace=marketplace, limit=limit, chain=chain,
        )

    # =========================================================================
    # TOOL 5: getWalletNFTs
    # =========================================================================
    @mcp.tool(name="getWalletNFTs", description=_describe("getWalletNFTs"))
    def get_wallet_nfts(
        walletAddress: str,
        chain: str = DEFAULT_CHAIN,
        limit: int = TOOL_LIMITS["getWalletNFTs"].default,
    ) -> dict:
        """One page of a wallet's NFTs plus the pageKey for the next one."""
        return _call("getWalletNFTs", walletAddress=walletAddress, chain=chain, limit=limit)

    # =========================================================================
    # TOOL 6: getNFTFloorPrice
    # =========================================================================
    @mcp.tool(name="getNFTFloorPrice", description=_describe("getNFTFloorPrice"))
    def get_floor_price(
        contractAddress: str,
        marketplace: str = "opensea",
        chain: str = DEFAULT_CHAIN,
    ) -> dict:
        """Floor quotes from every marketplace Alchemy tracks."""
        return _call(
            "getNFTFloorPrice",
            contractAddress=contractAddress, marketplace=marketplace, chain=chain,
        )

    # =========================================================================
    # TOOL 7: searchNFTCollections
    # =========================================================================
    @mcp.tool(name="searchNFTCollections", description=_describe("searchNFTCollections"))
    def search_collections(
        query: str,
        limit: int = TOOL_LIMITS["searchNFTCollections"].default,
        chain: str = DEFAULT_CHAIN,
    ) -> dict:
        """Free-text collection search on OpenSea."""
        return _call("searchNFTCollections", query=query, limit=limit, chain=chain)

    return mcp


# =============================================================================
# Server entry point
# =============================================================================
def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if not settings.alchemy_api_key:
        _log_status("ALCHEMY_API_KEY is not set; Alchemy-backed tools will fail")

    mcp = create_server(build_dispatcher(settings))
    logger.info("NFT Scanner MCP Server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
