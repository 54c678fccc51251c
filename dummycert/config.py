"""Environment / .env defaults for the command line."""
import os
from dotenv import load_dotenv

load_dotenv()

OUTPUT_DIR = os.getenv("DUMMYCERT_DIR", ".")
KEY_BITS = int(os.getenv("DUMMYCERT_BITS", "2048"))
VALIDITY_DAYS = int(os.getenv("DUMMYCERT_VALIDITY_DAYS", "365"))

TIME_LAYOUT = "%Y-%m-%d %H:%M:%S"

DISPLAY_NAMES = {
    "rootca": "Root Certificate Authority",
    "middle": "Middle Certificate Authority",
    "server": "Server Certificate",
    "client": "Client Certificate",
}
