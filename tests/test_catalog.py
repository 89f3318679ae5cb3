import pytest

from core.catalog import TOOL_CATALOG, TOOL_LIMITS, TOOLS_BY_NAME, ArgSpec
from core.chains import CHAIN_NETWORKS, network_for
from core.errors import ValidationError

TOOL_NAMES = [
    "getNFTCollectionDetails",
    "getNFTMetadata",
    "getNFTTransfers",
    "getNFTSales",
    "getWalletNFTs",
    "getNFTFloorPrice",
    "searchNFTCollections",
]


def test_catalog_has_the_seven_tools():
    assert [spec.name for spec in TOOL_CATALOG] == TOOL_NAMES


def test_list_tools_descriptors(dispatcher):
    tools = dispatcher.list_tools()

    assert [tool["name"] for tool in tools] == TOOL_NAMES
    for tool in tools:
        assert tool["description"]
        schema = tool["inputSchema"]
        assert schema["type"] == "object"
        assert schema["properties"]["chain"]["default"] == "ethereum"
        assert "chain" not in schema["required"]


def test_required_fields():
    required = {spec.name: spec.required for spec in TOOL_CATALOG}
    assert required == {
        "getNFTCollectionDetails": ["contractAddress"],
        "getNFTMetadata": ["contractAddress", "tokenId"],
        "getNFTTransfers": ["contractAddress"],
        "getNFTSales": ["contractAddress"],
        "getWalletNFTs": ["walletAddress"],
        "getNFTFloorPrice": ["contractAddress"],
        "searchNFTCollections": ["query"],
    }


def test_limit_defaults_in_schema():
    for name, policy in TOOL_LIMITS.items():
        limit = TOOLS_BY_NAME[name].input_schema()["properties"]["limit"]
        assert limit["type"] == "number"
        assert limit["default"] == policy.default
        assert f"max: {policy.cap}" in limit["description"]


def test_floor_price_marketplace_defaults_to_opensea():
    props = TOOLS_BY_NAME["getNFTFloorPrice"].input_schema()["properties"]
    assert props["marketplace"]["default"] == "opensea"


def test_bind_fills_defaults_and_snake_cases():
    bound = TOOLS_BY_NAME["getNFTTransfers"].bind({"contractAddress": "0xabc"})
    assert bound == {"contract_address": "0xabc", "token_id": None, "limit": 50, "chain": "ethereum"}


@pytest.mark.parametrize("arguments", [
    {"contractAddress": "0xabc"},
    {"contractAddress": "0xabc", "tokenId": None},
    {"contractAddress": "0xabc", "tokenId": "   "},
])
def test_bind_rejects_missing_token_id(arguments):
    with pytest.raises(ValidationError, match="tokenId"):
        TOOLS_BY_NAME["getNFTMetadata"].bind(arguments)


def test_bind_rejects_none_arguments():
    with pytest.raises(ValidationError, match="query"):
        TOOLS_BY_NAME["searchNFTCollections"].bind(None)


@pytest.mark.parametrize("raw, expected", [(500, 100), ("10", 10), (0, 1), (-5, 1), (7.9, 7)])
def test_bind_clamps_limit(raw, expected):
    bound = TOOLS_BY_NAME["getNFTSales"].bind({"contractAddress": "0xabc", "limit": raw})
    assert bound["limit"] == expected


def test_bind_rejects_non_numeric_limit():
    with pytest.raises(ValidationError, match="must be a number"):
        TOOLS_BY_NAME["getWalletNFTs"].bind({"walletAddress": "0xabc", "limit": "lots"})


def test_bind_stringifies_numeric_token_id():
    bound = TOOLS_BY_NAME["getNFTMetadata"].bind({"contractAddress": "0xabc", "tokenId": 1000})
    assert bound["token_id"] == "1000"


def test_arg_param_name():
    assert ArgSpec("walletAddress", "string", "").param == "wallet_address"
    assert ArgSpec("limit", "number", "").param == "limit"


def test_unknown_chain_uses_ethereum_network():
    assert network_for("base") == network_for("ethereum") == "eth-mainnet"
    assert network_for(None) == "eth-mainnet"


def test_known_chains():
    assert network_for("polygon") == "polygon-mainnet"
    assert network_for("Arbitrum") == "arb-mainnet"
    assert network_for("optimism") == "opt-mainnet"
    with pytest.raises(TypeError):
        CHAIN_NETWORKS["base"] = "base-mainnet"
