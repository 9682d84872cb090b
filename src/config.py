"""
Configuration from environment variables.

Read once at import time. src/main.py loads .env.local / .env before importing
this module, so values from those files are visible here.
"""

import os

# BM25 parameters
BM25_K1 = float(os.getenv("BM25_K1", "1.5"))
BM25_B = float(os.getenv("BM25_B", "0.75"))

# Ingestion
INGEST_CHUNK_SIZE = int(os.getenv("INGEST_CHUNK_SIZE", "100"))

# Query
DEFAULT_SEARCH_LIMIT = int(os.getenv("DEFAULT_SEARCH_LIMIT", "20"))
MAX_SEARCH_LIMIT = int(os.getenv("MAX_SEARCH_LIMIT", "100"))

# Snippet window (characters)
SNIPPET_CHARS_BEFORE = int(os.getenv("SNIPPET_CHARS_BEFORE", "60"))
SNIPPET_CHARS_AFTER = int(os.getenv("SNIPPET_CHARS_AFTER", "200"))
SNIPPET_FALLBACK_CHARS = int(os.getenv("SNIPPET_FALLBACK_CHARS", "150"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "logs/semantic-search.log")

# HTTP server
PORT = int(os.getenv("PORT", "8080"))
