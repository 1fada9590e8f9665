# =============================================================================
# core/classify.py  —  Response Classification
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Decides whether one remote call succeeded.  The 115 API very often
#   answers HTTP 200 with a body like:
#
#       {"state": false, "errno": 20130827, "error": "..."}
#
#   so the body must be inspected even when the transport and the HTTP status
#   look fine.  The checks run in a fixed order and stop at the first failure:
#
#       1. transport error   → APIError(TRANSPORT)   (body and status ignored)
#       2. non-2xx status    → APIError(HTTP_STATUS)
#       3. body says failure → APIError(API_STATE, code, message)
#       4. otherwise         → None
#
# BODY STATUS INDICATOR:
#   "state" is read tolerantly (true/false, 1/0, "1"/"0").  A few endpoints
#   (e.g. category/get) omit it on success; there a non-zero error code is
#   the only failure signal.
#
# ERROR CODES:
#   Messages come from the body itself.  The provider's code table is not
#   reproduced here.
# =============================================================================

import logging
from typing import Any, Optional

from core.errors import APIError, DecodeError
from core.scalar import ScalarKind, decode

logger = logging.getLogger(__name__)

_STATE_KEY = "state"
_CODE_KEYS = ("errno", "errNo", "code", "errcode", "errCode")
_MESSAGE_KEYS = ("error", "msg", "message", "error_msg", "errMsg")


def classify(
    transport_error: Optional[BaseException],
    body: Any,
    http_status: int,
) -> Optional[APIError]:
    """Classify one call; ``None`` means the body may be mapped."""
    if transport_error is not None:
        return APIError.transport(transport_error)

    if not 200 <= http_status < 300:
        return APIError.http_status(http_status)

    if not isinstance(body, dict):
        return APIError.api_state(0, f"unexpected response body of type {type(body).__name__}")

    code = error_code(body)
    ok = _state(body)
    if ok is None:
        ok = code == 0
    if not ok:
        message = error_message(body)
        logger.warning("API reported failure: code=%s message=%r", code, message)
        return APIError.api_state(code, message)
    return None


def _state(body: dict) -> Optional[bool]:
    if _STATE_KEY not in body:
        return None
    value = body[_STATE_KEY]
    if isinstance(value, bool):
        return value
    try:
        return bool(decode(ScalarKind.BOOL_AS_INT, value, _STATE_KEY))
    except DecodeError:
        # A state we cannot read is not a success.
        return False


def error_code(body: dict) -> int:
    """First non-zero provider error code found in the body, or 0."""
    for key in _CODE_KEYS:
        try:
            code = int(decode(ScalarKind.INT, body.get(key), key))
        except DecodeError:
            continue
        if code:
            return code
    return 0


def error_message(body: dict) -> str:
    """First non-empty provider error message found in the body."""
    for key in _MESSAGE_KEYS:
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""
