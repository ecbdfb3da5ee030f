"""Environment-driven settings, read at call time."""

import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_CACHE_SIZE = 64
DEFAULT_MAX_AST_NODES = 250_000
DEFAULT_LOG_LEVEL = "WARNING"


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    return value if value > 0 else default


def is_local_only() -> bool:
    """True when remote fetches are disabled."""
    return os.environ.get("PIPEOUTLINE_LOCAL_ONLY", "").lower() in ("true", "1", "yes")


def max_file_size() -> int:
    return _int_env("PIPEOUTLINE_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE)


def cache_size() -> int:
    return _int_env("PIPEOUTLINE_CACHE_SIZE", DEFAULT_CACHE_SIZE)


def max_ast_nodes() -> int:
    """Upper bound on AST nodes built per file, aliases included."""
    return _int_env("PIPEOUTLINE_MAX_AST_NODES", DEFAULT_MAX_AST_NODES)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def log_level() -> str:
    level = os.environ.get("PIPEOUTLINE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL


def github_token() -> str:
    return os.environ.get("GITHUB_TOKEN", "")
