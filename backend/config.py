"""Configuration management for the Pepe Unchained Knowledge Assistant."""
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# Generation Configuration
GENERATION_MODEL = os.getenv("GENERATION_MODEL", "llama-3.1-8b-instant")
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.8"))
GENERATION_MAX_TOKENS = int(os.getenv("GENERATION_MAX_TOKENS", "200"))

# Data Files
DATA_DIR = Path(os.getenv("DATA_DIR", str(Path(__file__).parent.parent / "data")))
SCRAPED_DATA_FILE = Path(os.getenv("SCRAPED_DATA_FILE", str(DATA_DIR / "scraped_content.json")))
PROCESSED_DATA_FILE = Path(os.getenv("PROCESSED_DATA_FILE", str(DATA_DIR / "processed_content.json")))

# Chunking Configuration
CHUNK_SIZE = 2000  # characters
CHUNK_OVERLAP = 200  # characters, carried as CHUNK_OVERLAP // 10 words
MIN_CONTENT_LENGTH = 50
GUIDE_HOST = "guide.pepeunchained.com"

# Answer Configuration
PROMPT_CHUNK_CHAR_BUDGET = 800
FALLBACK_CHAR_BUDGET = 800

# Price Configuration
PRICE_API_BASE_URL = os.getenv("PRICE_API_BASE_URL", "https://api.geckoterminal.com/api/v2")
PEPU_POOL_ADDRESS = os.getenv(
    "PEPU_POOL_ADDRESS",
    "0xb1b10b05aa043dd8d471d4da999782bc694993e3ecbe8e7319892b261b412ed5"
)
PRICE_TIMEOUT = float(os.getenv("PRICE_TIMEOUT", "15.0"))

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
