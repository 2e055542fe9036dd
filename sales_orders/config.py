import os
from pathlib import Path

from .constants import DEFAULT_API_URL

BASE_DIR = Path(__file__).resolve().parent

# ---- Remote API ----
API_URL = os.getenv("SALES_API_URL", DEFAULT_API_URL)
API_TIMEOUT = float(os.getenv("SALES_API_TIMEOUT", "30"))

# Sent with every master save; the server has no session to derive them from.
YEAR_ID = int(os.getenv("SALES_YEAR_ID", "1"))
LOGIN_ID = int(os.getenv("SALES_LOGIN_ID", "1"))

# ---- Logging ----
LOG_LEVEL = os.getenv("SALES_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("SALES_LOG_DIR", str(BASE_DIR.parent / "logs")))
LOG_FILE = os.getenv("SALES_LOG_FILE", "sales_orders.log")

# ---- UI behaviour ----
SNACKBAR_MS = int(os.getenv("SALES_SNACKBAR_MS", "3000"))
# Above this many distinct values a text column filter falls back to "contains".
FILTER_AUTOCOMPLETE_MAX = int(os.getenv("SALES_FILTER_AUTOCOMPLETE_MAX", "100"))
