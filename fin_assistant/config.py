import os

from dotenv import load_dotenv

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
MODEL_NAME = os.getenv("FIN_MODEL", "gpt-4o-mini")
LLM_TEMPERATURE = 0.3
LLM_TIMEOUT_SEC = float(os.getenv("FIN_LLM_TIMEOUT", "20"))
MAX_TURNS = 6 # Maximum number of recent user/assistant turns to keep in context.

CATALOG_SOURCE = os.getenv("FIN_CATALOG", "curated") # "curated" or "feed"
CATALOG_FEED_URL = os.getenv(
    "FIN_CATALOG_FEED_URL",
    "https://huggingface.co/datasets/TrainingDataPro/asos-e-commerce-dataset/resolve/main/products_asos.csv",
)
FEED_TIMEOUT_SEC = float(os.getenv("FIN_FEED_TIMEOUT", "60"))
FEED_MAX_PRICE = 2000.0 # Feed rows priced at or above this are dropped
MIN_NAME_LENGTH = 10

FALLBACK_RESULTS = 6 # Products returned by the local keyword search
CATALOG_SUMMARY_LIMIT = 60 # Above this, the prompt lists subcategories instead of products

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
MAX_SESSIONS = int(os.getenv("FIN_MAX_SESSIONS", "1000")) # Conversations kept in memory by the server
