# =============================================================================
# main.py  —  Demo client for the NFT Scanner MCP server
# =============================================================================
#
# HOW TO RUN:
#   python main.py            (needs ALCHEMY_API_KEY in the env or .env)
#
# WHAT HAPPENS:
#   1. Starts tools/mcp_server.py as a subprocess speaking MCP over stdio
#   2. Lists the available tools (tools/list)
#   3. Calls every tool against well-known collections:
#        BAYC details, CryptoPunks floor, BAYC #1000 metadata,
#        "Azuki" search, recent BAYC transfers, vitalik.eth's wallet
#   4. Prints a short human-readable summary of each response
#
#   Every upstream call pays the 1s rate-limit delay, so the full run takes
#   a while even when nothing fails.
# =============================================================================

import asyncio
import json
import os
import sys

from dotenv import load_dotenv
from fastmcp import Client
from fastmcp.client.transports import StdioTransport
from fastmcp.exceptions import ToolError
from mcp.shared.exceptions import MCPError

load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

BAYC = "0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D"
CRYPTOPUNKS = "0xb47e3cd837dDF8e4c57F05d70Ab865de6e193BBB"
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


def _server_transport() -> StdioTransport:
    """Run the server as `python -m tools.mcp_server` from the project root."""
    return StdioTransport(
        command=sys.executable,
        args=["-m", "tools.mcp_server"],
        env=dict(os.environ),
        cwd=PROJECT_ROOT,
    )


async def _call(client: Client, name: str, arguments: dict) -> dict:
    """Call a tool and decode the JSON text it returns."""
    result = await client.call_tool(name, arguments)
    content = getattr(result, "content", result)
    return json.loads(content[0].text)


async def run_demo():
    print("=" * 70)
    print("  NFT SCANNER MCP DEMO")
    print("  Alchemy + OpenSea over FastMCP (stdio)")
    print("=" * 70)

    async with Client(_server_transport()) as client:

        # ---------------------------------------------------------------------
        # Step 1: tools/list
        # ---------------------------------------------------------------------
        print("\n📋 Available NFT Tools:")
        tools = await client.list_tools()
        for index, tool in enumerate(tools, start=1):
            print(f"{index}. {tool.name}: {tool.description}")

        # ---------------------------------------------------------------------
        # Step 2: one call per tool
        # ---------------------------------------------------------------------
        steps = [
            ("🐒 BAYC collection details", "getNFTCollectionDetails",
             {"contractAddress": BAYC, "chain": "ethereum"}, _show_collection),
            ("👾 CryptoPunks floor price", "getNFTFloorPrice",
             {"contractAddress": CRYPTOPUNKS, "chain": "ethereum"}, _show_floor),
            ("🖼️  BAYC #1000 metadata", "getNFTMetadata",
             {"contractAddress": BAYC, "tokenId": "1000", "chain": "ethereum"}, _show_metadata),
            ("🔍 Searching for \"Azuki\"", "searchNFTCollections",
             {"query": "Azuki", "limit": 3, "chain": "ethereum"}, _show_search),
            ("🔄 Recent BAYC transfers", "getNFTTransfers",
             {"contractAddress": BAYC, "limit": 5, "chain": "ethereum"}, _show_transfers),
            ("👛 NFTs held by vitalik.eth", "getWalletNFTs",
             {"walletAddress": VITALIK, "chain": "ethereum", "limit": 5}, _show_wallet),
        ]

        for title, tool_name, arguments, show in steps:
            print(f"\n{title}...")
            try:
                data = await _call(client, tool_name, arguments)
            except MCPError as exc:
                print(f"  ⚠️  {tool_name} failed ({exc.error.code}): {exc.error.message}")
                continue
            except ToolError as exc:
                print(f"  ⚠️  {tool_name} failed: {exc}")
                continue
            show(data)

    print("\n✅ Demo completed.")


# =============================================================================
# Pretty printers
# =============================================================================
def _show_collection(data: dict) -> None:
    details = data["collectionDetails"]
    stats = details["marketStats"]
    print(f"  Collection:   {details['name']}")
    print(f"  Total Supply: {details['totalSupply']}")
    print(f"  Floor Price:  {stats['floorPrice']} ETH")
    print(f"  Total Volume: {stats['totalVolume']} ETH")
    print(f"  Owners:       {stats['numOwners']}")


def _show_floor(data: dict) -> None:
    for label, key in (("OpenSea", "openSea"), ("LooksRare", "looksRare"), ("Blur", "blur")):
        quote = data["floorPrice"].get(key) or {}
        print(f"  - {label}: {quote.get('floorPrice', 'N/A')} {quote.get('priceCurrency', '')}")


def _show_metadata(data: dict) -> None:
    metadata = data["metadata"]
    print(f"  Token: {metadata['name']}")
    print(f"  Owner: {metadata['owner']}")
    print(f"  Attributes: {len(metadata['attributes'])} traits")
    for attribute in metadata["attributes"][:3]:
        print(f"    - {attribute.get('trait_type')}: {attribute.get('value')}")


def _show_search(data: dict) -> None:
    print(f"  Found {data['resultCount']} collections:")
    for index, hit in enumerate(data["collections"][:3], start=1):
        print(f"  {index}. {hit['name']}  contract={hit['contractAddress']}  floor={hit['floorPrice']}")


def _show_transfers(data: dict) -> None:
    print(f"  {data['transferCount']} transfers:")
    for transfer in data["transfers"][:3]:
        print(f"  - Token #{transfer['tokenId']}  {transfer['from']} → {transfer['to']}  "
              f"block {transfer['blockNumber']}")


def _show_wallet(data: dict) -> None:
    print(f"  Wallet holds {data['totalNFTs']} NFTs (showing {data['nftsReturned']}):")
    for nft in data["nfts"][:3]:
        print(f"  - {nft['name'] or 'Token #' + str(nft['tokenId'])}  ({nft['collection']['name']})")


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    asyncio.run(run_demo())
