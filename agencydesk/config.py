# agencydesk/config.py
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

# Load .env if present (local/dev). Hosted environments already carry their vars.
load_dotenv()


def env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None: return default
    try:
        return bool(int(v))
    except ValueError:
        return str(v).strip().lower() in ("true", "yes", "y", "on")

def env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None: return default
    try:
        return int(v)
    except ValueError:
        return default

def env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None: return default
    try:
        return float(v)
    except ValueError:
        return default

def env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return v if v is not None else default

# Environment
ENV = env_str("ENV", "local")                 # local | dev | prod
LOG_LEVEL = env_str("LOG_LEVEL", "INFO").upper()

# Record service the client talks to
API_BASE_URL = env_str("API_BASE_URL", "http://localhost:8000")
HTTP_TIMEOUT_SEC = env_float("HTTP_TIMEOUT_SEC", 10.0)
LIST_PAGE_SIZE = env_int("LIST_PAGE_SIZE", 500)       # rows per GET when reading a whole collection

# Commission policy. Both values are configuration, not derived business rules.
AGENT_COMMISSION_RATE = env_float("AGENT_COMMISSION_RATE", 0.6)   # agent 60 / company 40
DEFAULT_COMMISSION_PERCENTAGE = env_str("DEFAULT_COMMISSION_PERCENTAGE", "70.00")

_LOGGING_CONFIGURED = False

def configure_logging(level: str | None = None) -> None:
    """Configure a basic root handler once; leave existing app-wide setups alone."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level or LOG_LEVEL,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    _LOGGING_CONFIGURED = True
