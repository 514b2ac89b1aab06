import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Local storage area (mirror of the collections + the auth session)
# SQLite (default): "sqlite+aiosqlite:///./console.db"
# Empty string: keep local storage in memory for the lifetime of the process
DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./console.db")

# Remote blob store: "file" (JSON files in DATA_DIR), "http" (BLOB_STORE_URL) or "memory"
BLOB_STORE: str = os.environ.get("BLOB_STORE", "http" if os.environ.get("BLOB_STORE_URL") else "file")

# Directory holding users.json / organizations.json / orders.json
DATA_DIR: str = os.environ.get("DATA_DIR", "./data")

# Base URL of another console serving /api/save-data
BLOB_STORE_URL: Optional[str] = os.environ.get("BLOB_STORE_URL")

# Seconds before an HTTP blob store call is abandoned
BLOB_STORE_TIMEOUT: float = float(os.environ.get("BLOB_STORE_TIMEOUT", "10"))

# Allow requests from this origin
ALLOW_ORIGIN: Optional[str] = os.environ.get("ALLOW_ORIGIN")

# If true, enable docs and openapi.json endpoints
ENABLE_DOCS: bool = os.environ.get("ENABLE_DOCS") == "1"

# Default slowapi limit applied to every route
RATE_LIMIT: str = os.environ.get("RATE_LIMIT", "120/minute")

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
