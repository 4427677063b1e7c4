import os
from dotenv import load_dotenv

load_dotenv()

GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
GROQ_TEMPERATURE = float(os.getenv("GROQ_TEMPERATURE", "0.7"))
GROQ_MAX_TOKENS = int(os.getenv("GROQ_MAX_TOKENS", "2048"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sessions.db")

# Where uploaded files are stored
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploaded_excels")
os.makedirs(UPLOAD_DIR, exist_ok=True)

# Query result caps. Unset MAX_GROUP_ROWS means groupBy/topN are not capped.
MAX_LISTING_ROWS = int(os.getenv("MAX_LISTING_ROWS", "100"))
MAX_GROUP_ROWS = int(os.environ["MAX_GROUP_ROWS"]) if os.getenv("MAX_GROUP_ROWS") else None

# Model context sizing
LARGE_DATASET_THRESHOLD = int(os.getenv("LARGE_DATASET_THRESHOLD", "1000"))
CONTEXT_SAMPLE_ROWS = int(os.getenv("CONTEXT_SAMPLE_ROWS", "50"))
DIGEST_MAX_COLUMNS = int(os.getenv("DIGEST_MAX_COLUMNS", "10"))

# Dataset snapshots kept in memory; older sessions reload from their file
MAX_CACHED_DATASETS = int(os.getenv("MAX_CACHED_DATASETS", "32"))
