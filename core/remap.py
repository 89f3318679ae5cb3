# =============================================================================
# core/remap.py  —  Provider JSON → output models
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Pure functions that pick fields out of Alchemy / OpenSea payloads and
#   build the dataclasses in core/models.py.  No I/O, no logging.
#
#   Provider payloads are treated as untrusted shapes: any nested object may
#   be missing or null, so every lookup goes through _obj() / _first().
# =============================================================================

from typing import Any, Optional

from core.models import (
    CollectionDetails,
    CollectionRef,
    CollectionSearchHit,
    ContractSummary,
    FloorPrices,
    MarketStats,
    NFTMetadata,
    OwnedNFT,
    PaymentToken,
    Royalties,
    Sale,
    SaleAsset,
    SocialLinks,
    Transfer,
)

UNKNOWN_COLLECTION = "Unknown Collection"

# getNFTFloorPrice `marketplace` argument → key in Alchemy's response
FLOOR_PRICE_KEYS = {
    "opensea": "openSea",
    "looksrare": "looksRare",
    "blur": "blur",
}


def _obj(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _first(items: Any) -> dict:
    if isinstance(items, list) and items:
        return _obj(items[0])
    return {}


def _first_present(*values: Any) -> Any:
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


# -----------------------------------------------------------------------------
# Collection details (Alchemy contract metadata + OpenSea stats)
# -----------------------------------------------------------------------------
def collection_details(contract: Optional[dict], market: Optional[dict]) -> CollectionDetails:
    """Merge Alchemy contract metadata with OpenSea market data.

    Alchemy wins for identity fields (name, symbol, supply); OpenSea supplies
    stats, socials and royalties.  Either argument may be empty when that
    provider failed.
    """
    contract = _obj(contract)
    contract = _obj(contract.get("contractMetadata")) or contract
    market = _obj(market)
    collection = _obj(market.get("collection"))
    stats = _obj(market.get("stats")) or _obj(collection.get("stats"))

    verified = bool(collection.get("verified")) or (
        collection.get("safelist_request_status") == "verified"
    )

    return CollectionDetails(
        name=_first_present(contract.get("name"), collection.get("name")) or UNKNOWN_COLLECTION,
        description=_first_present(
            contract.get("description"),
            _obj(contract.get("openSea")).get("description"),
            collection.get("description"),
        ),
        total_supply=contract.get("totalSupply"),
        symbol=contract.get("symbol"),
        contract_type=contract.get("tokenType"),
        verified=verified,
        market_stats=MarketStats(
            floor_price=stats.get("floor_price"),
            floor_price_eth=stats.get("floor_price"),
            total_volume=stats.get("total_volume"),
            total_sales=stats.get("total_sales"),
            average_price=stats.get("average_price"),
            market_cap=stats.get("market_cap"),
            num_owners=stats.get("num_owners"),
            one_day_volume=stats.get("one_day_volume"),
            one_day_change=stats.get("one_day_change"),
            seven_day_volume=stats.get("seven_day_volume"),
            seven_day_change=stats.get("seven_day_change"),
        ),
        social=SocialLinks(
            website=collection.get("external_url"),
            discord=collection.get("discord_url"),
            twitter=collection.get("twitter_username"),
            instagram=collection.get("instagram_username"),
        ),
        royalties=Royalties(
            seller_fee_basis_points=_first_present(
                collection.get("dev_seller_fee_basis_points"),
                market.get("dev_seller_fee_basis_points"),
            ),
            royalty_recipient=_first_present(
                collection.get("payout_address"),
                market.get("payout_address"),
            ),
        ),
    )


# -----------------------------------------------------------------------------
# Single-token metadata
# -----------------------------------------------------------------------------
def nft_metadata(payload: dict, owners: Optional[dict] = None) -> NFTMetadata:
    payload = _obj(payload)
    metadata = _obj(payload.get("metadata"))
    contract = _obj(payload.get("contractMetadata")) or _obj(payload.get("contract"))
    owner_list = _obj(owners).get("owners")

    return NFTMetadata(
        name=_first_present(payload.get("title"), metadata.get("name")),
        description=_first_present(payload.get("description"), metadata.get("description")),
        image=_first_present(metadata.get("image"), _first(payload.get("media")).get("gateway")),
        attributes=metadata.get("attributes") or [],
        token_type=_first_present(
            _obj(_obj(payload.get("id")).get("tokenMetadata")).get("tokenType"),
            payload.get("tokenType"),
        ),
        token_uri=payload.get("tokenUri"),
        owner=owner_list[0] if isinstance(owner_list, list) and owner_list else None,
        minted_at=payload.get("timeLastUpdated"),
        contract_metadata=ContractSummary(
            name=contract.get("name"),
            symbol=contract.get("symbol"),
            total_supply=contract.get("totalSupply"),
        ),
    )


# -----------------------------------------------------------------------------
# Transfers
# -----------------------------------------------------------------------------
def _hex_to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value), 16)
    except ValueError:
        return None


def transfer_token_id(item: dict) -> Optional[str]:
    return _first_present(
        item.get("erc721TokenId"),
        item.get("tokenId"),
        _first(item.get("erc1155Metadata")).get("tokenId"),
    )


def same_token(left: Optional[str], right: Optional[str]) -> bool:
    """Compare token ids that may be decimal ("1000") or hex ("0x3e8")."""
    if left is None or right is None:
        return False
    return _token_number(left) == _token_number(right)


def _token_number(token_id: str) -> Any:
    text = str(token_id).strip().lower()
    try:
        return int(text, 16) if text.startswith("0x") else int(text)
    except ValueError:
        return text


def transfer(item: dict) -> Transfer:
    item = _obj(item)
    return Transfer(
        block_number=_hex_to_int(item.get("blockNum")),
        transaction_hash=item.get("hash"),
        from_=item.get("from"),
        to=item.get("to"),
        token_id=transfer_token_id(item),
        value=item.get("value"),
        asset=item.get("asset"),
        category=item.get("category"),
        raw_contract=item.get("rawContract"),
        metadata=item.get("metadata"),
        timestamp=_obj(item.get("metadata")).get("blockTimestamp"),
    )


# -----------------------------------------------------------------------------
# Sales
# -----------------------------------------------------------------------------
def sale(event: dict) -> Sale:
    event = _obj(event)
    token = _obj(event.get("payment_token"))
    txn = _obj(event.get("transaction"))
    asset = _obj(event.get("asset"))

    return Sale(
        event_type=event.get("event_type"),
        auction_type=event.get("auction_type"),
        total_price=event.get("total_price"),
        payment_token=PaymentToken(
            symbol=token.get("symbol"),
            address=token.get("address"),
            decimals=token.get("decimals"),
        ),
        seller=_obj(event.get("seller")).get("address"),
        buyer=_first_present(
            _obj(event.get("winner_account")).get("address"),
            _obj(event.get("to_account")).get("address"),
        ),
        quantity=event.get("quantity"),
        transaction_hash=txn.get("transaction_hash"),
        block_hash=txn.get("block_hash"),
        block_number=txn.get("block_number"),
        timestamp=txn.get("timestamp"),
        asset=SaleAsset(
            token_id=asset.get("token_id"),
            name=asset.get("name"),
            image_url=asset.get("image_url"),
        ),
    )


# -----------------------------------------------------------------------------
# Wallet holdings
# -----------------------------------------------------------------------------
def owned_nft(item: dict) -> OwnedNFT:
    item = _obj(item)
    metadata = _obj(item.get("metadata"))
    token = _obj(item.get("id"))
    contract = _obj(item.get("contract"))
    contract_meta = _obj(item.get("contractMetadata")) or contract

    return OwnedNFT(
        contract_address=contract.get("address"),
        token_id=token.get("tokenId"),
        token_type=_obj(token.get("tokenMetadata")).get("tokenType"),
        name=_first_present(item.get("title"), metadata.get("name")),
        description=_first_present(item.get("description"), metadata.get("description")),
        image=_first_present(metadata.get("image"), _first(item.get("media")).get("gateway")),
        attributes=metadata.get("attributes") or [],
        collection=CollectionRef(
            name=contract_meta.get("name"),
            symbol=contract_meta.get("symbol"),
        ),
        balance=item.get("balance"),
        raw_metadata=item.get("metadata"),
    )


# -----------------------------------------------------------------------------
# Floor price
# -----------------------------------------------------------------------------
def floor_prices(payload: dict) -> FloorPrices:
    payload = _obj(payload)
    return FloorPrices(
        open_sea=payload.get("openSea"),
        looks_rare=payload.get("looksRare"),
        blur=payload.get("blur"),
    )


def selected_floor(payload: dict, marketplace: Optional[str]) -> Optional[dict]:
    """The quote for `marketplace`, or None if Alchemy has none for it."""
    key = FLOOR_PRICE_KEYS.get((marketplace or "").strip().lower())
    if key is None:
        return None
    return _obj(payload).get(key)


# -----------------------------------------------------------------------------
# Collection search
# -----------------------------------------------------------------------------
def search_hit(collection: dict) -> CollectionSearchHit:
    collection = _obj(collection)
    stats = _obj(collection.get("stats"))

    return CollectionSearchHit(
        slug=collection.get("slug"),
        name=collection.get("name"),
        description=collection.get("description"),
        image_url=collection.get("image_url"),
        contract_address=_first(collection.get("primary_asset_contracts")).get("address"),
        total_supply=stats.get("total_supply"),
        floor_price=stats.get("floor_price"),
        total_volume=stats.get("total_volume"),
        num_owners=stats.get("num_owners"),
        verified=collection.get("verified"),
        external_url=collection.get("external_url"),
        discord_url=collection.get("discord_url"),
        twitter_username=collection.get("twitter_username"),
        created_date=collection.get("created_date"),
    )
