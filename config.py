"""Application configuration — environment variables and derived constants.

Loads ``BOT_TOKEN`` and the polling / retry knobs from the environment via
``python-dotenv``.  All values are resolved at import time so other modules
can ``from config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── project ──────────────────────────────────────────────────────────────────
from core.logger import DakiyaLogger
from sdk.models import UpdateType

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

logger = DakiyaLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_int(name: str, default: int) -> int:
    """Read a non-negative integer variable, falling back to *default*."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Invalid integer in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    if value < 0:
        logger.warning("Negative value in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    return value


def _parse_float(name: str, default: float) -> float:
    """Read a non-negative float variable, falling back to *default*."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("Invalid number in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    return value if value >= 0 else default


def _parse_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    logger.warning("Invalid boolean in environment, using default", extra={"variable": name, "value": raw, "default": default})
    return default


def _parse_allowed_updates(raw: str | None) -> list[UpdateType] | None:
    """Parse a comma-separated list of update types.

    ``None`` or an empty string means "all update types" and yields ``None``.
    Unknown names are skipped with a warning; if none parse, the result is
    ``None`` as well.
    """
    if raw is None or not raw.strip():
        return None
    result: list[UpdateType] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            result.append(UpdateType(token))
        except ValueError:
            logger.warning("Unknown update type in ALLOWED_UPDATES, skipping", extra={"update_type": token})
    if not result:
        # The Bot API reads [] as "the default set", which would widen the filter.
        logger.warning("No valid update types in ALLOWED_UPDATES, receiving all types", extra={"value": raw})
        return None
    return result


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
BASE_URL: str = f"https://api.telegram.org/bot{BOT_TOKEN or ''}"
REQUEST_TIMEOUT: int = _parse_int("REQUEST_TIMEOUT", 10)
POLLING_TIMEOUT: int = _parse_int("POLLING_TIMEOUT", 30)
RETRY_MAX: int = max(1, _parse_int("RETRY_MAX", 3))
RETRY_DEFAULT_DELAY: float = _parse_float("RETRY_DEFAULT_DELAY", 30.0)
DROP_PENDING_UPDATES: bool = _parse_bool("DROP_PENDING_UPDATES")
ALLOWED_UPDATES: list[UpdateType] | None = _parse_allowed_updates(os.environ.get("ALLOWED_UPDATES"))


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set, BASE_URL ready")
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

logger.info(
    "Polling configuration resolved",
    extra={
        "polling_timeout": POLLING_TIMEOUT,
        "request_timeout": REQUEST_TIMEOUT,
        "retry_max": RETRY_MAX,
        "drop_pending_updates": DROP_PENDING_UPDATES,
        "allowed_updates": [u.value for u in ALLOWED_UPDATES] if ALLOWED_UPDATES is not None else "all",
    },
)
