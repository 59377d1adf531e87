import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent
load_dotenv(_PROJECT_ROOT / ".env")

# Paths
DATA_DIR = Path(os.getenv("CRE_DATA_DIR", str(_PROJECT_ROOT / "data")))

# Logging
LOG_LEVEL = os.getenv("CRE_LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Uploads
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ALLOWED_EXTENSIONS = (".csv",)

# Matching
FUZZY_THRESHOLD = 3

# Address defaults for addresses that carry no city/state part
DEFAULT_CITY = "Nashville"
DEFAULT_STATE = "TN"

# Clients
FOLLOW_UP_DAYS = 7

# Properties
DEFAULT_SOURCE = "CSV Import"

# Dashboard
PAGE_SIZE = 10

# Persistence keys, one blob per collection
LLCS_KEY = "llcs"
CLIENTS_KEY = "clients"
PROPERTIES_KEY = "properties"
