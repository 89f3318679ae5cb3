# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL data-fetching and reshaping logic for the NFT
# scanner.
#
# ARCHITECTURAL RULE:
#   Only the `mcp.types` error-code constants are imported from the MCP SDK;
#   nothing here imports FastMCP or touches stdio.  The server layer in
#   tools/ wires these pieces together:
#
#     Settings → RequestExecutor → AlchemyClient / OpenSeaClient
#                                        → ToolDispatcher
# =============================================================================
