# =============================================================================
# core/config.py  —  Runtime Settings
# =============================================================================
#
# Settings come from environment variables (main.py calls load_dotenv()
# first, so a local .env file works too):
#
#   PAN115_COOKIE      required   "UID=...;CID=...;SEID=..." (KID optional)
#   PAN115_USER_AGENT  optional   defaults to the 115 browser User-Agent
#   PAN115_TIMEOUT     optional   per-request timeout in seconds (default 30)
# =============================================================================

import os
from dataclasses import dataclass
from typing import Optional

from core.errors import ValidationError

UA_115_BROWSER = "Mozilla/5.0 115Browser/27.0.6.3"

_REQUIRED_COOKIE_KEYS = ("UID", "CID", "SEID")


@dataclass(frozen=True)
class Settings:
    cookie: str
    user_agent: str = UA_115_BROWSER
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls, cookie: Optional[str] = None) -> "Settings":
        """Build settings from the environment; ``cookie`` overrides PAN115_COOKIE."""
        timeout_raw = os.environ.get("PAN115_TIMEOUT", "").strip()
        try:
            timeout = float(timeout_raw) if timeout_raw else 30.0
        except ValueError as exc:
            raise ValidationError(f"PAN115_TIMEOUT must be a number, got {timeout_raw!r}") from exc
        if timeout <= 0:
            raise ValidationError("PAN115_TIMEOUT must be positive")

        return cls(
            cookie=(cookie or os.environ.get("PAN115_COOKIE", "")).strip(),
            user_agent=os.environ.get("PAN115_USER_AGENT", "").strip() or UA_115_BROWSER,
            timeout_seconds=timeout,
        )


def parse_cookie(cookie: str) -> dict[str, str]:
    """Split a ``k=v; k=v`` cookie string and check the login keys are there."""
    pairs: dict[str, str] = {}
    for part in cookie.split(";"):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        key = key.strip()
        if key:
            pairs[key] = value.strip()

    missing = [key for key in _REQUIRED_COOKIE_KEYS if not pairs.get(key)]
    if missing:
        raise ValidationError(f"cookie is missing required keys: {', '.join(missing)}")
    return pairs
