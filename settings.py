# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Updated: 2026-10-02
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Any, Dict


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise RuntimeError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Embeddings
# -----------------------------------------------------------------------------
# Column type is vector(768); changing this needs a schema migration.
EMBEDDING_DIMENSION = 768

DEFAULT_EMBED_MODEL = _env("MP_DEFAULT_EMBED_MODEL", "text-embedding-3-small")
DEFAULT_CHAT_MODEL = _env("MP_DEFAULT_CHAT_MODEL", "gpt-4o-mini")


# -----------------------------------------------------------------------------
# Chunking
# -----------------------------------------------------------------------------
CHUNK_WINDOW_WORDS = _env_int("MP_CHUNK_WINDOW_WORDS", 500)
CHUNK_OVERLAP_WORDS = _env_int("MP_CHUNK_OVERLAP_WORDS", 50)

# 1 = one embedding call at a time per document
INDEX_CONCURRENCY = _env_int("MP_INDEX_CONCURRENCY", 1)


# -----------------------------------------------------------------------------
# Retrieval defaults
# -----------------------------------------------------------------------------
RETRIEVAL_DEFAULTS: Dict[str, Any] = {
    "knowledge_results": _env_int("MP_KNOWLEDGE_RESULTS", 5),
    "similar_threads": _env_int("MP_SIMILAR_THREADS", 3),
    "search_limit": _env_int("MP_SEARCH_LIMIT", 10),
}

# Lexical fallback rows carry this instead of a cosine score
FALLBACK_SIMILARITY = 0.5

DUPLICATE_MIN_CHARS = _env_int("MP_DUPLICATE_MIN_CHARS", 15)
DUPLICATE_LIMIT = _env_int("MP_DUPLICATE_LIMIT", 3)


# -----------------------------------------------------------------------------
# Provider calls
# -----------------------------------------------------------------------------
PROVIDER_TIMEOUT_SECONDS = _env_float("MP_PROVIDER_TIMEOUT_SECONDS", 20.0)
PROVIDER_MAX_ATTEMPTS = _env_int("MP_PROVIDER_MAX_ATTEMPTS", 3)

GENERATION_DEFAULTS: Dict[str, Any] = {
    "temperature": _env_float("MP_GENERATION_TEMPERATURE", 0.2),
    "max_tokens": _env_int("MP_GENERATION_MAX_TOKENS", 700),
}


# -----------------------------------------------------------------------------
# Bot identity
# -----------------------------------------------------------------------------
BOT_EMAIL = _env("MP_BOT_EMAIL", "atelierbot@system")
BOT_NAME = _env("MP_BOT_NAME", "AtelierBot")


# -----------------------------------------------------------------------------
# Postgres pool
# -----------------------------------------------------------------------------
DB_POOL_MIN_SIZE = _env_int("MP_DB_POOL_MIN_SIZE", 1)
DB_POOL_MAX_SIZE = _env_int("MP_DB_POOL_MAX_SIZE", 10)
DB_COMMAND_TIMEOUT = _env_float("MP_DB_COMMAND_TIMEOUT", 30.0)


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if CHUNK_OVERLAP_WORDS >= CHUNK_WINDOW_WORDS:
    raise RuntimeError(
        f"MP_CHUNK_OVERLAP_WORDS ({CHUNK_OVERLAP_WORDS}) must be < MP_CHUNK_WINDOW_WORDS ({CHUNK_WINDOW_WORDS})"
    )

if INDEX_CONCURRENCY < 1:
    raise RuntimeError("MP_INDEX_CONCURRENCY must be >= 1")

if PROVIDER_MAX_ATTEMPTS < 1:
    raise RuntimeError("MP_PROVIDER_MAX_ATTEMPTS must be >= 1")
