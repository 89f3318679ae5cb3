# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP and core/.  It:
#     1. Registers each catalog tool with FastMCP under its wire name
#     2. Forwards arguments to core.dispatcher.ToolDispatcher
#     3. Turns core errors into FastMCP ToolErrors
#     4. Owns process wiring: .env loading, logging to stderr, stdio transport
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT talk to Alchemy or OpenSea directly (that's core/)
#   - They do NOT reshape provider JSON (that's core/remap.py)
# =============================================================================
