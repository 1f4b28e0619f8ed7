import os
from pathlib import Path

DATA_DIR = Path(os.getenv("SHOPLIST_DATA_DIR", Path(__file__).parent.parent / "data"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s"

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", 8000))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Per-connection outbound buffer; events beyond it are dropped for that socket
WS_SEND_QUEUE_SIZE = int(os.getenv("WS_SEND_QUEUE_SIZE", 256))
