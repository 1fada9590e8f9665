# =============================================================================
# tools/__init__.py
# =============================================================================
# FastMCP tool wrappers around core.client.Pan115Client.
#
# Each tool:
#   1. Converts its arguments into client arguments (query options, id lists)
#   2. Calls one client method
#   3. Converts the dataclass result into a dict for JSON
#   4. Turns a DriverError into {"error": "..."} instead of raising
#
# Tools hold no business logic: decoding, defaults and error classification
# all live in core/.
# =============================================================================
