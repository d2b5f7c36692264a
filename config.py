import os
from dotenv import load_dotenv

load_dotenv()

GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")

# Where uploaded spreadsheets are stored
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploaded_files")
os.makedirs(UPLOAD_DIR, exist_ok=True)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dashboards.db")

MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "20"))

# How many rows are sent to the suggestion service
SUGGESTION_SAMPLE_ROWS = int(os.getenv("SUGGESTION_SAMPLE_ROWS", "10"))

# Raw rows shown by line/area charts
SEQUENTIAL_WINDOW = int(os.getenv("SEQUENTIAL_WINDOW", "50"))
PREVIEW_ROWS = int(os.getenv("PREVIEW_ROWS", "20"))

DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "local-user")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

BACKEND_URL = os.getenv("BACKEND_URL", "http://127.0.0.1:8000")
