"""Configuration for the wager ledger."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Paths
BASE_DIR = Path(__file__).parent
DB_PATH = Path(os.getenv("WAGER_DB_PATH", str(BASE_DIR / "wagers.db")))

# Postgres DSN; SQLite is used when unset
DB_URL = os.getenv("DB_URL", "")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Settlement
SETTLEMENT_WORKERS = int(os.getenv("SETTLEMENT_WORKERS", "1"))
# Exact-tie spreads grade as a loss unless this is set
SPREAD_PUSH_ON_TIE = _env_bool("SPREAD_PUSH_ON_TIE", False)

# Portfolio display
DEFAULT_TIMEFRAME = os.getenv("DEFAULT_TIMEFRAME", "1W")
RECENT_BETS_LIMIT = 10

# CLI user when --user is omitted
DEFAULT_USER_ID = os.getenv("WAGER_USER_ID", "local")
