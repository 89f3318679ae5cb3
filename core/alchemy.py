# =============================================================================
# core/alchemy.py  —  Alchemy client (primary blockchain-data provider)
# =============================================================================
#
# ENDPOINTS USED:
#   NFT API v2   https://<network>.g.alchemy.com/nft/v2/<key>/<method>
#     getContractMetadata   collection-level contract info
#     getNFTMetadata        one token's metadata
#     getOwnersForToken     current owner(s) of one token
#     getNFTs               everything a wallet owns
#     getFloorPrice         floor price per marketplace
#   JSON-RPC     https://<network>.g.alchemy.com/v2/<key>
#     alchemy_getAssetTransfers   ERC-721 / ERC-1155 transfer history
#
# The API key lives in the URL path, so every request carries a `label`
# for logging instead of its URL.  Methods return the provider's JSON as-is;
# reshaping happens in core/remap.py.
# =============================================================================

from typing import Any, Optional

from core.chains import network_for
from core.config import Settings
from core.errors import ConfigurationError, RequestError
from core.executor import RequestDescriptor, RequestExecutor

NFT_CATEGORIES = ["erc721", "erc1155"]

# Largest page alchemy_getAssetTransfers will return (0x3e8)
MAX_TRANSFER_PAGE = 1000


class AlchemyClient:
    """Thin wrapper over the Alchemy NFT and transfers APIs."""

    def __init__(self, settings: Settings, executor: RequestExecutor):
        self._settings = settings
        self._executor = executor

    # -------------------------------------------------------------------------
    # URL building
    # -------------------------------------------------------------------------
    def _api_key(self) -> str:
        if not self._settings.alchemy_api_key:
            raise ConfigurationError("Alchemy API key not configured")
        return self._settings.alchemy_api_key

    def _host(self, chain: str) -> str:
        return self._settings.alchemy_host_template.format(network=network_for(chain))

    def nft_url(self, chain: str, method: str) -> str:
        return f"{self._host(chain)}/nft/v2/{self._api_key()}/{method}"

    def rpc_url(self, chain: str) -> str:
        return f"{self._host(chain)}/v2/{self._api_key()}"

    def _get(self, chain: str, method: str, params: dict) -> Any:
        url = self.nft_url(chain, method)
        descriptor = RequestDescriptor.get(url, params, label=f"alchemy:{method}")
        return self._executor.execute(descriptor)

    # -------------------------------------------------------------------------
    # NFT API
    # -------------------------------------------------------------------------
    def contract_metadata(self, contract_address: str, chain: str) -> dict:
        return self._get(chain, "getContractMetadata", {"contractAddress": contract_address})

    def nft_metadata(self, contract_address: str, token_id: str, chain: str) -> dict:
        return self._get(chain, "getNFTMetadata", {
            "contractAddress": contract_address,
            "tokenId": token_id,
        })

    def owners_for_token(self, contract_address: str, token_id: str, chain: str) -> dict:
        return self._get(chain, "getOwnersForToken", {
            "contractAddress": contract_address,
            "tokenId": token_id,
        })

    def owned_nfts(self, owner: str, chain: str, page_size: int) -> dict:
        return self._get(chain, "getNFTs", {
            "owner": owner,
            "pageSize": page_size,
            "withMetadata": "true",
        })

    def floor_price(self, contract_address: str, chain: str) -> dict:
        return self._get(chain, "getFloorPrice", {"contractAddress": contract_address})

    # -------------------------------------------------------------------------
    # Transfers (JSON-RPC)
    # -------------------------------------------------------------------------
    def asset_transfers(
        self,
        contract_address: str,
        chain: str,
        max_count: int,
        from_block: str = "0x0",
        to_block: str = "latest",
        categories: Optional[list[str]] = None,
        page_key: Optional[str] = None,
    ) -> dict:
        """Newest-first NFT transfers for one contract, one page at a time.

        Pass the previous result's `pageKey` as `page_key` to get the next page.

        Returns:
            The JSON-RPC `result` object: {"transfers": [...], "pageKey": ...}.

        Raises:
            RequestError: if the RPC envelope carries an `error` member.
        """
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "alchemy_getAssetTransfers",
            "params": [{
                "fromBlock": from_block,
                "toBlock": to_block,
                "contractAddresses": [contract_address],
                "category": categories or NFT_CATEGORIES,
                "maxCount": hex(min(max_count, MAX_TRANSFER_PAGE)),
                "excludeZeroValue": True,
                "withMetadata": True,
                "order": "desc",
            }],
        }
        descriptor = RequestDescriptor.post_json(
            self.rpc_url(chain), body, label="alchemy:getAssetTransfers"
        )
        response = self._executor.execute(descriptor)

        error = (response or {}).get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise RequestError(f"Alchemy RPC error: {message}")
        return (response or {}).get("result") or {}
