"""
Configuration for the query engine, the explorer shell and the HTTP API.

Values come from environment variables; a ``.env`` file in the working
directory is loaded first.
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Engine Configuration
ENGINE_CONFIG = {
    # Directory of <table>.json files; unset means the bundled sample tables
    "data_dir": os.getenv("MINIQUERY_DATA_DIR") or None,
    # Raise on unparseable WHERE/HAVING instead of matching every row
    "strict_predicates": _flag("MINIQUERY_STRICT_PREDICATES"),
}

# Application Configuration
APP_CONFIG = {
    "debug": _flag("DEBUG"),
    "name": "SQL Explorer",
    "secret_key": os.getenv("MINIQUERY_SECRET_KEY", "miniquery-dev-key"),
    "host": os.getenv("MINIQUERY_HOST", "127.0.0.1"),
    "port": int(os.getenv("MINIQUERY_PORT", "5000")),
}

# Logging Configuration
LOG_CONFIG = {
    "level": os.getenv("MINIQUERY_LOG_LEVEL", "DEBUG" if APP_CONFIG["debug"] else "INFO").upper(),
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
}
