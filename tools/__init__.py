# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP binding.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP and core/.  It:
#     1. Registers one FastMCP tool per catalog entry (core/catalog.py)
#     2. Hands each call to the Dispatcher (core/dispatcher.py)
#     3. Turns a SisenseError into a ToolError / ResourceError whose text
#        starts with the machine-readable code
#     4. Logs requests and responses to stderr
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT validate input or talk HTTP (that's core/)
# =============================================================================
