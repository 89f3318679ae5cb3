# =============================================================================
# core/dispatcher.py  —  Tool Dispatcher (tool name + arguments → result)
# =============================================================================
#
# HOW A CALL FLOWS:
#   call_tool("getNFTMetadata", {"contractAddress": ..., "tokenId": ...})
#     1. look up the ToolSpec            unknown → ProtocolError
#     2. spec.bind(arguments)            missing/empty → ValidationError
#     3. run the routine                 1..N provider calls, in order
#     4. remap into core/models.py       → envelope dict
#   Any error from step 3/4 is caught ONCE here and rewrapped as
#   ToolExecutionError("<tool prefix>: <message>") with the original as cause.
#
# ENVELOPE (every tool):
#   {timestamp, <echoed inputs>, <result>, dataSource, lastUpdated}
#
# PARTIAL FAILURES:
#   getNFTCollectionDetails reads two providers and degrades when one fails
#   (OpenSea stats → asset_contract fallback → placeholders).
#   getNFTMetadata treats the owner lookup as optional.
#   Every other provider failure propagates.  ConfigurationError always does.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from core import remap
from core.alchemy import MAX_TRANSFER_PAGE, AlchemyClient
from core.catalog import TOOL_CATALOG, TOOLS_BY_NAME, ToolSpec
from core.errors import (
    NFTScannerError,
    ProtocolError,
    RequestError,
    ToolExecutionError,
)
from core.models import to_json
from core.opensea import OpenSeaClient

logger = logging.getLogger(__name__)

# Pages of MAX_TRANSFER_PAGE scanned when getNFTTransfers filters by token id
TOKEN_TRANSFER_PAGE_BUDGET = 5


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ToolDispatcher:
    """Routes MCP tool calls to provider-backed routines.

    Args:
        alchemy: Primary blockchain-data provider client.
        opensea: Marketplace-stats provider client.
        clock: Returns the envelope timestamp; swapped in tests.
    """

    def __init__(
        self,
        alchemy: AlchemyClient,
        opensea: OpenSeaClient,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self._alchemy = alchemy
        self._opensea = opensea
        self._clock = clock
        self._routines: dict[str, Callable[..., dict]] = {
            "getNFTCollectionDetails": self.get_collection_details,
            "getNFTMetadata": self.get_nft_metadata,
            "getNFTTransfers": self.get_nft_transfers,
            "getNFTSales": self.get_nft_sales,
            "getWalletNFTs": self.get_wallet_nfts,
            "getNFTFloorPrice": self.get_floor_price,
            "searchNFTCollections": self.search_collections,
        }

    # =========================================================================
    # Protocol surface
    # =========================================================================
    def list_tools(self) -> list[dict]:
        """The tools/list catalog: name, description and input schema per tool."""
        return [spec.descriptor() for spec in TOOL_CATALOG]

    def validate(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> tuple[ToolSpec, dict]:
        """Resolve `name` and bind `arguments` without calling any provider.

        Raises:
            ProtocolError: `name` is not a known tool.
            ValidationError: a required argument is missing.
        """
        spec = TOOLS_BY_NAME.get(name)
        if spec is None:
            raise ProtocolError(f"Unknown tool: {name}")
        return spec, spec.bind(arguments)

    def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> dict:
        """Validate arguments, run the named tool and return its envelope.

        Raises:
            ProtocolError: `name` is not a known tool.
            ValidationError: a required argument is missing.
            ToolExecutionError: the routine failed; `.cause` is the original.
        """
        spec, kwargs = self.validate(name, arguments)
        routine = self._routines[name]

        try:
            return routine(**kwargs)
        except NFTScannerError as exc:
            logger.error("%s failed: %s", name, exc)
            raise ToolExecutionError(name, f"{spec.failure_prefix}: {exc}", exc) from exc
        except Exception as exc:
            logger.exception("%s failed unexpectedly", name)
            raise ToolExecutionError(name, f"{spec.failure_prefix}: {exc}", exc) from exc

    def _envelope(self, echo: dict, result: dict, data_source: str) -> dict:
        envelope = {"timestamp": self._clock()}
        envelope.update(echo)
        envelope.update(result)
        envelope["dataSource"] = data_source
        envelope["lastUpdated"] = self._clock()
        return envelope

    # =========================================================================
    # TOOL 1: getNFTCollectionDetails  (Alchemy + OpenSea)
    # =========================================================================
    def get_collection_details(self, contract_address: str, chain: str) -> dict:
        contract, contract_error = self._try_contract_metadata(contract_address, chain)
        market = self._market_data(contract_address)

        if contract_error is not None and not market:
            # Both providers came back empty; nothing to degrade to.
            raise contract_error

        details = remap.collection_details(contract, market)
        return self._envelope(
            {"contractAddress": contract_address, "chain": chain},
            {"collectionDetails": to_json(details)},
            "Alchemy + OpenSea API",
        )

    def _try_contract_metadata(
        self, contract_address: str, chain: str
    ) -> tuple[dict, Optional[RequestError]]:
        try:
            return self._alchemy.contract_metadata(contract_address, chain), None
        except RequestError as exc:
            logger.warning("Alchemy contract metadata unavailable for %s: %s", contract_address, exc)
            return {}, exc

    def _market_data(self, contract_address: str) -> dict:
        """OpenSea stats, else the asset_contract record, else {}."""
        try:
            return self._opensea.collection_stats(contract_address)
        except RequestError as exc:
            logger.warning("OpenSea stats unavailable for %s (%s); trying asset_contract",
                           contract_address, exc)

        try:
            return self._opensea.asset_contract(contract_address)
        except RequestError as exc:
            logger.warning("OpenSea asset_contract unavailable for %s: %s", contract_address, exc)
            return {}

    # =========================================================================
    # TOOL 2: getNFTMetadata
    # =========================================================================
    def get_nft_metadata(self, contract_address: str, token_id: str, chain: str) -> dict:
        payload = self._alchemy.nft_metadata(contract_address, token_id, chain)

        try:
            owners = self._alchemy.owners_for_token(contract_address, token_id, chain)
        except RequestError as exc:
            logger.warning("Owner lookup failed for %s #%s: %s", contract_address, token_id, exc)
            owners = None

        metadata = remap.nft_metadata(payload, owners)
        return self._envelope(
            {"contractAddress": contract_address, "tokenId": token_id, "chain": chain},
            {
                "metadata": to_json(metadata),
                "rawMetadata": (payload or {}).get("metadata"),
            },
            "Alchemy NFT API",
        )

    # =========================================================================
    # TOOL 3: getNFTTransfers
    # =========================================================================
    def get_nft_transfers(
        self, contract_address: str, token_id: Optional[str], limit: int, chain: str
    ) -> dict:
        if token_id is None:
            result = self._alchemy.asset_transfers(contract_address, chain, max_count=limit)
            items = result.get("transfers") or []
        else:
            items = self._token_transfers(contract_address, token_id, limit, chain)

        transfers = [to_json(remap.transfer(item)) for item in items[:limit]]
        return self._envelope(
            {"contractAddress": contract_address, "tokenId": token_id or "all", "chain": chain},
            {"transferCount": len(transfers), "transfers": transfers},
            "Alchemy Transfers API",
        )

    def _token_transfers(
        self, contract_address: str, token_id: str, limit: int, chain: str
    ) -> list[dict]:
        """Walk full pages newest-first, keeping only `token_id`'s transfers.

        Alchemy can't filter by token id, so a busy collection can bury the
        token several pages deep.  Stops at `limit` matches, the last page,
        or after TOKEN_TRANSFER_PAGE_BUDGET pages.
        """
        matches: list[dict] = []
        page_key = None
        for _ in range(TOKEN_TRANSFER_PAGE_BUDGET):
            result = self._alchemy.asset_transfers(
                contract_address, chain, max_count=MAX_TRANSFER_PAGE, page_key=page_key
            )
            matches.extend(
                item for item in result.get("transfers") or []
                if remap.same_token(remap.transfer_token_id(item), token_id)
            )
            page_key = result.get("pageKey")
            if len(matches) >= limit or not page_key:
                return matches

        logger.info("Stopped after %d transfer pages for %s #%s with %d match(es)",
                    TOKEN_TRANSFER_PAGE_BUDGET, contract_address, token_id, len(matches))
        return matches

    # =========================================================================
    # TOOL 4: getNFTSales
    # =========================================================================
    def get_nft_sales(
        self,
        contract_address: str,
        token_id: Optional[str],
        marketplace: Optional[str],
        limit: int,
        chain: str,
    ) -> dict:
        only_opensea = (marketplace or "").strip().lower() == "opensea"
        response = self._opensea.sale_events(
            contract_address, limit, token_id=token_id, only_opensea=only_opensea
        )
        sales = [to_json(remap.sale(event)) for event in (response or {}).get("asset_events") or []]

        return self._envelope(
            {
                "contractAddress": contract_address,
                "tokenId": token_id or "all",
                "chain": chain,
                "marketplace": marketplace or "all",
            },
            {"salesCount": len(sales), "sales": sales},
            "OpenSea Events API",
        )

    # =========================================================================
    # TOOL 5: getWalletNFTs
    # =========================================================================
    def get_wallet_nfts(self, wallet_address: str, chain: str, limit: int) -> dict:
        response = self._alchemy.owned_nfts(wallet_address, chain, page_size=limit) or {}
        nfts = [to_json(remap.owned_nft(item)) for item in response.get("ownedNfts") or []]

        return self._envelope(
            {"walletAddress": wallet_address, "chain": chain},
            {
                "totalNFTs": response.get("totalCount"),
                "nftsReturned": len(nfts),
                "nfts": nfts,
                "pageKey": response.get("pageKey"),
            },
            "Alchemy NFT API",
        )

    # =========================================================================
    # TOOL 6: getNFTFloorPrice
    # =========================================================================
    def get_floor_price(self, contract_address: str, marketplace: str, chain: str) -> dict:
        response = self._alchemy.floor_price(contract_address, chain) or {}

        return self._envelope(
            {"contractAddress": contract_address, "chain": chain, "marketplace": marketplace},
            {
                "floorPrice": to_json(remap.floor_prices(response)),
                "selected": remap.selected_floor(response, marketplace),
            },
            "Alchemy Floor Price API",
        )

    # =========================================================================
    # TOOL 7: searchNFTCollections
    # =========================================================================
    def search_collections(self, query: str, limit: int, chain: str) -> dict:
        response = self._opensea.search_collections(query, limit) or {}
        collections = [to_json(remap.search_hit(item)) for item in response.get("collections") or []]

        return self._envelope(
            {"query": query, "chain": chain},
            {"resultCount": len(collections), "collections": collections},
            "OpenSea Collections API",
        )
