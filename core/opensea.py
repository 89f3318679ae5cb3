# =============================================================================
# core/opensea.py  —  OpenSea client (marketplace-stats provider)
# =============================================================================
#
# ENDPOINTS USED (API v1):
#   /api/v1/collection/<id>/stats        floor price, volume, owners
#   /api/v1/asset_contract/<address>     contract → collection lookup
#   /api/v1/events                       sale events
#   /api/v1/collections?search=          free-text collection search
#
# The API key is optional.  Without it requests go out unauthenticated and
# OpenSea applies its lower anonymous rate limits; nothing here enforces them.
# =============================================================================

from typing import Any, Optional
from urllib.parse import quote

from core.config import Settings
from core.executor import RequestDescriptor, RequestExecutor


class OpenSeaClient:
    """Thin wrapper over the OpenSea v1 REST API."""

    def __init__(self, settings: Settings, executor: RequestExecutor):
        self._settings = settings
        self._executor = executor

    @property
    def headers(self) -> dict[str, str]:
        if self._settings.opensea_api_key:
            return {"X-API-KEY": self._settings.opensea_api_key}
        return {}

    def _get(self, path: str, params: Optional[dict] = None, label: str = "") -> Any:
        url = f"{self._settings.opensea_base_url}/api/v1/{path}"
        descriptor = RequestDescriptor.get(url, params, headers=self.headers, label=label)
        return self._executor.execute(descriptor)

    def collection_stats(self, collection: str) -> dict:
        return self._get(f"collection/{quote(collection, safe='')}/stats", label="opensea:stats")

    def asset_contract(self, contract_address: str) -> dict:
        return self._get(f"asset_contract/{quote(contract_address, safe='')}", label="opensea:asset_contract")

    def sale_events(
        self,
        contract_address: str,
        limit: int,
        token_id: Optional[str] = None,
        only_opensea: bool = False,
    ) -> dict:
        return self._get("events", {
            "asset_contract_address": contract_address,
            "event_type": "successful",
            "only_opensea": "true" if only_opensea else "false",
            "limit": limit,
            "token_id": token_id,
        }, label="opensea:events")

    def search_collections(self, query: str, limit: int) -> dict:
        return self._get("collections", {"limit": limit, "search": query}, label="opensea:collections")
