# =============================================================================
# core/__init__.py
# =============================================================================
# The request/response translation layer between the MCP tools and the 115
# web API.
#
#   scalar.py    tolerant decoding of type-ambiguous wire values
#   query.py     per-endpoint defaults + ordered query options
#   classify.py  transport / HTTP / body-state error classification
#   mapping.py   raw JSON body → domain dataclasses (models.py)
#   client.py    one method per operation, wiring the four together
#
# Nothing in this package imports FastMCP.  The tools/ layer depends on core/,
# never the other way round.
# =============================================================================
