# qr_service/config.py   – environment‑driven settings
import os

# ───────────────────────── mongo ──────────────────────────────
MONGO_URI        = os.getenv("MONGO_URI",        "mongodb://localhost:27017")
DB_NAME          = os.getenv("MONGO_DB",         "qrcode_tracking")
COLLECTION_NAME  = os.getenv("MONGO_COLLECTION", "tracking")
APP_NAME         = "QR Code Tracking"

# ───────────────────────── attribute table ────────────────────
ATTRIBUTES_PATH     = os.getenv("ATTRIBUTES_PATH", "attributes.bin")
ATTRIBUTES_CAPACITY = int(os.getenv("ATTRIBUTES_CAPACITY", "365"))
ATTRIBUTES_SEED     = int(os.getenv("ATTRIBUTES_SEED", "0"))

# ───────────────────────── http ───────────────────────────────
HOST      = os.getenv("HOST",      "127.0.0.1")
PORT      = int(os.getenv("PORT",  "4000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
