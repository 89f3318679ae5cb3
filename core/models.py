# =============================================================================
# core/models.py  —  Output Models (the shapes every tool returns)
# =============================================================================
#
# These dataclasses define the stable output schema.  Provider JSON is messy
# and differs per upstream; core/remap.py turns it into these, and to_json()
# turns these into the camelCase dicts sent over MCP.
#
# NAMING:
#   Fields are snake_case in Python and camelCase on the wire
#   (floor_price → floorPrice).  _WIRE_NAMES lists the few that don't follow
#   the plain rule.  Raw provider payloads stored in `raw_*` / `metadata`
#   fields are plain dicts and keep their original keys.
#
# ABSENT VALUES:
#   Anything a provider didn't send is None and serialises as JSON null.
# =============================================================================

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

_WIRE_NAMES = {
    "floor_price_eth": "floorPriceETH",
    "total_nfts": "totalNFTs",
    "nfts_returned": "nftsReturned",
}


def _camel(name: str) -> str:
    if name in _WIRE_NAMES:
        return _WIRE_NAMES[name]
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _camel_dict(items: list[tuple[str, Any]]) -> dict:
    return {_camel(key): value for key, value in items}


def to_json(model: Any) -> dict:
    """Serialise a model dataclass to its camelCase wire dict."""
    return asdict(model, dict_factory=_camel_dict)


# -----------------------------------------------------------------------------
# getNFTCollectionDetails
# -----------------------------------------------------------------------------
@dataclass
class MarketStats:
    """Marketplace statistics; every figure is in the chain's native token."""

    floor_price: Optional[float] = None
    floor_price_eth: Optional[float] = None
    total_volume: Optional[float] = None
    total_sales: Optional[float] = None
    average_price: Optional[float] = None
    market_cap: Optional[float] = None
    num_owners: Optional[int] = None
    one_day_volume: Optional[float] = None
    one_day_change: Optional[float] = None
    seven_day_volume: Optional[float] = None
    seven_day_change: Optional[float] = None


@dataclass
class SocialLinks:
    website: Optional[str] = None
    discord: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None


@dataclass
class Royalties:
    seller_fee_basis_points: Optional[int] = None
    royalty_recipient: Optional[str] = None


@dataclass
class CollectionDetails:
    """A collection as seen by Alchemy (contract) and OpenSea (market)."""

    name: str
    description: Optional[str] = None
    total_supply: Optional[str] = None
    symbol: Optional[str] = None
    contract_type: Optional[str] = None
    verified: bool = False
    market_stats: MarketStats = field(default_factory=MarketStats)
    social: SocialLinks = field(default_factory=SocialLinks)
    royalties: Royalties = field(default_factory=Royalties)


# -----------------------------------------------------------------------------
# getNFTMetadata
# -----------------------------------------------------------------------------
@dataclass
class ContractSummary:
    name: Optional[str] = None
    symbol: Optional[str] = None
    total_supply: Optional[str] = None


@dataclass
class NFTMetadata:
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    attributes: list = field(default_factory=list)
    token_type: Optional[str] = None
    token_uri: Any = None              # Alchemy sends {raw, gateway}
    owner: Optional[str] = None
    minted_at: Optional[str] = None    # Alchemy's timeLastUpdated
    contract_metadata: ContractSummary = field(default_factory=ContractSummary)


# -----------------------------------------------------------------------------
# getNFTTransfers
# -----------------------------------------------------------------------------
@dataclass
class Transfer:
    block_number: Optional[int]
    transaction_hash: Optional[str]
    from_: Optional[str] = None
    to: Optional[str] = None
    token_id: Optional[str] = None
    value: Any = None
    asset: Optional[str] = None
    category: Optional[str] = None
    raw_contract: Optional[dict] = None
    metadata: Optional[dict] = None
    timestamp: Optional[str] = None    # block timestamp, ISO-8601


# -----------------------------------------------------------------------------
# getNFTSales
# -----------------------------------------------------------------------------
@dataclass
class PaymentToken:
    symbol: Optional[str] = None
    address: Optional[str] = None
    decimals: Optional[int] = None


@dataclass
class SaleAsset:
    token_id: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class Sale:
    event_type: Optional[str] = None
    auction_type: Optional[str] = None
    total_price: Optional[str] = None  # smallest unit of payment_token, as sent
    payment_token: PaymentToken = field(default_factory=PaymentToken)
    seller: Optional[str] = None
    buyer: Optional[str] = None
    quantity: Optional[str] = None
    transaction_hash: Optional[str] = None
    block_hash: Optional[str] = None
    block_number: Optional[str] = None
    timestamp: Optional[str] = None
    asset: SaleAsset = field(default_factory=SaleAsset)
    marketplace: str = "OpenSea"


# -----------------------------------------------------------------------------
# getWalletNFTs
# -----------------------------------------------------------------------------
@dataclass
class CollectionRef:
    name: Optional[str] = None
    symbol: Optional[str] = None


@dataclass
class OwnedNFT:
    contract_address: Optional[str]
    token_id: Optional[str]
    token_type: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    attributes: list = field(default_factory=list)
    collection: CollectionRef = field(default_factory=CollectionRef)
    balance: Optional[str] = None
    raw_metadata: Optional[dict] = None


# -----------------------------------------------------------------------------
# getNFTFloorPrice
# -----------------------------------------------------------------------------
@dataclass
class FloorPrices:
    """Per-marketplace floor quotes, passed through as Alchemy sends them."""

    open_sea: Optional[dict] = None
    looks_rare: Optional[dict] = None
    blur: Optional[dict] = None


# -----------------------------------------------------------------------------
# searchNFTCollections
# -----------------------------------------------------------------------------
@dataclass
class CollectionSearchHit:
    slug: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    contract_address: Optional[str] = None
    total_supply: Optional[float] = None
    floor_price: Optional[float] = None
    total_volume: Optional[float] = None
    num_owners: Optional[int] = None
    verified: Optional[bool] = None
    external_url: Optional[str] = None
    discord_url: Optional[str] = None
    twitter_username: Optional[str] = None
    created_date: Optional[str] = None
