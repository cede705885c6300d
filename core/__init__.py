# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL of the request-handling logic for the Sisense
# MCP server: validation, the upstream client, error classification and
# dispatch.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  Every module here can be
#   exercised from a bare Python REPL (or pytest) with a fake HTTP transport.
#   tools/ is the only layer that knows about the MCP protocol library.
# =============================================================================
