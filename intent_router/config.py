import os
from pathlib import Path

from dotenv import load_dotenv

from intent_router.core.logging import get_logger
_log = get_logger("config")

load_dotenv()

APP_VERSION = os.getenv("INTENT_ROUTER_VERSION", "1.0")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

PACKAGE_ROOT = Path(__file__).parent.resolve()
DATA_ROOT = PACKAGE_ROOT / "data"


def _get_int_env(name: str, default: int) -> int:
    """Get integer value from environment variable.

    Args:
        name: Environment variable name
        default: Default value if not set or invalid

    Returns:
        Integer value from env or default
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        _log.warning("Invalid int env", env=name, value=raw)
        return default


def _get_float_env(name: str, default: float) -> float:
    """Get float value from environment variable.

    Args:
        name: Environment variable name
        default: Default value if not set or invalid

    Returns:
        Float value from env or default
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        _log.warning("Invalid float env", env=name, value=raw)
        return default


def _get_path_env(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if not raw:
        return default
    return Path(raw).expanduser()


# =============================================================================
# Intent catalog
# =============================================================================
INTENT_CATALOG_PATH = _get_path_env("INTENT_CATALOG_PATH", DATA_ROOT / "intent_catalog.json")

# =============================================================================
# Pattern matcher
# =============================================================================
PATTERN_MATCH_CONFIDENCE = _get_float_env("PATTERN_MATCH_CONFIDENCE", 0.95)

# =============================================================================
# Embeddings / semantic matcher
# =============================================================================
EMBEDDING_API_KEY = os.getenv("EMBEDDING_API_KEY") or os.getenv("OPENAI_API_KEY")
EMBEDDING_BASE_URL = os.getenv("EMBEDDING_BASE_URL", "https://api.openai.com")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
EMBEDDING_DIMENSION = _get_int_env("EMBEDDING_DIMENSION", 1536)
EMBEDDING_TIMEOUT_SECONDS = _get_float_env("EMBEDDING_TIMEOUT_SECONDS", 5.0)
EMBEDDING_CACHE_SIZE = _get_int_env("EMBEDDING_CACHE_SIZE", 2048)

# Circuit breaker around the provider. Skips the network after repeated
# failures; the local embedding covers the gap.
EMBEDDING_CB_FAILURE_THRESHOLD = _get_int_env("EMBEDDING_CB_FAILURE_THRESHOLD", 5)
EMBEDDING_CB_COOLDOWN_SECONDS = _get_float_env("EMBEDDING_CB_COOLDOWN_SECONDS", 60.0)

SEMANTIC_SIMILARITY_THRESHOLD = _get_float_env("SEMANTIC_SIMILARITY_THRESHOLD", 0.75)
SEMANTIC_MAX_ALTERNATIVES = _get_int_env("SEMANTIC_MAX_ALTERNATIVES", 3)

# =============================================================================
# Trained classifier
# =============================================================================
MODEL_HIDDEN_SIZE = _get_int_env("MODEL_HIDDEN_SIZE", 128)
MODEL_LEARNING_RATE = _get_float_env("MODEL_LEARNING_RATE", 0.5)
MODEL_TRAIN_EPOCHS = _get_int_env("MODEL_TRAIN_EPOCHS", 300)
MODEL_RETRAIN_EPOCHS = _get_int_env("MODEL_RETRAIN_EPOCHS", 20)
MODEL_SEED = _get_int_env("MODEL_SEED", 42)
MODEL_SNAPSHOT_PATH = _get_path_env("MODEL_SNAPSHOT_PATH", None)

# =============================================================================
# Ensemble
# =============================================================================
ENSEMBLE_WEIGHT_PATTERN = _get_float_env("ENSEMBLE_WEIGHT_PATTERN", 0.30)
ENSEMBLE_WEIGHT_SEMANTIC = _get_float_env("ENSEMBLE_WEIGHT_SEMANTIC", 0.35)
ENSEMBLE_WEIGHT_TRAINED = _get_float_env("ENSEMBLE_WEIGHT_TRAINED", 0.35)
ENSEMBLE_CONFIDENCE_THRESHOLD = _get_float_env("ENSEMBLE_CONFIDENCE_THRESHOLD", 0.6)
# Sub-results below this do not vote at all.
ENSEMBLE_MIN_VOTE_CONFIDENCE = _get_float_env("ENSEMBLE_MIN_VOTE_CONFIDENCE", 0.35)
ENSEMBLE_MAX_ALTERNATIVES = _get_int_env("ENSEMBLE_MAX_ALTERNATIVES", 3)
METHOD_TIMEOUT_SECONDS = _get_float_env("METHOD_TIMEOUT_SECONDS", 8.0)

ENSEMBLE_WEIGHTS = {
    "pattern": ENSEMBLE_WEIGHT_PATTERN,
    "semantic": ENSEMBLE_WEIGHT_SEMANTIC,
    "trained_model": ENSEMBLE_WEIGHT_TRAINED,
}

# =============================================================================
# Feedback loop / analytics
# =============================================================================
FEEDBACK_RETRAIN_THRESHOLD = _get_int_env("FEEDBACK_RETRAIN_THRESHOLD", 50)
USAGE_LOG_MAX_ENTRIES = _get_int_env("USAGE_LOG_MAX_ENTRIES", 10_000)
