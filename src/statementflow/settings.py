import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from statementflow.logger import get_logger

logger = get_logger(__name__)

# The classifier's batch contract enumerates at most ten lines.
MAX_CLASSIFIER_BATCH_SIZE = 10

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_CLASSIFIER_TIMEOUT = 20.0
DEFAULT_CLASSIFIER_MAX_WORKERS = 4
# Retries multiply the time a request can block; each attempt gets the full timeout.
DEFAULT_CLASSIFIER_MAX_RETRIES = 0


@dataclass(frozen=True)
class Settings:
    db_path: Optional[str] = None
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_base_url: Optional[str] = None
    classifier_timeout: float = DEFAULT_CLASSIFIER_TIMEOUT
    classifier_batch_size: int = MAX_CLASSIFIER_BATCH_SIZE
    classifier_max_workers: int = DEFAULT_CLASSIFIER_MAX_WORKERS
    classifier_max_retries: int = DEFAULT_CLASSIFIER_MAX_RETRIES

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)


def _resolve_dotenv_path() -> Optional[str]:
    config_dir = os.getenv("STATEMENTFLOW_CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    resolved = find_dotenv(usecwd=True)
    return resolved or None


def get_env_int(
    name: str,
    default: int,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("[ENV] %s='%s' below minimum %s, using default %s.", name, raw, min_value, default)
        return default
    if max_value is not None and value > max_value:
        logger.warning("[ENV] %s='%s' above maximum %s, using %s.", name, raw, max_value, max_value)
        return max_value
    return value


def get_env_float(name: str, default: float, min_value: Optional[float] = None) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("[ENV] %s='%s' below minimum %s, using default %s.", name, raw, min_value, default)
        return default
    return value


def load_settings(load_env_file: bool = True) -> Settings:
    """Build settings from the environment, reading a ``.env`` file first.

    Variables already present in the environment take precedence over the
    ``.env`` file.
    """
    if load_env_file:
        dotenv_path = _resolve_dotenv_path()
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)

    return Settings(
        db_path=os.getenv("STATEMENTFLOW_DB_PATH") or None,
        log_level=os.getenv("STATEMENTFLOW_LOG_LEVEL", "INFO").upper(),
        log_dir=os.getenv("STATEMENTFLOW_LOG_DIR") or None,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        classifier_timeout=get_env_float("CLASSIFIER_TIMEOUT", DEFAULT_CLASSIFIER_TIMEOUT, min_value=0.1),
        classifier_batch_size=get_env_int(
            "CLASSIFIER_BATCH_SIZE",
            MAX_CLASSIFIER_BATCH_SIZE,
            min_value=1,
            max_value=MAX_CLASSIFIER_BATCH_SIZE,
        ),
        classifier_max_workers=get_env_int(
            "CLASSIFIER_MAX_WORKERS",
            DEFAULT_CLASSIFIER_MAX_WORKERS,
            min_value=1,
        ),
        classifier_max_retries=get_env_int(
            "CLASSIFIER_MAX_RETRIES",
            DEFAULT_CLASSIFIER_MAX_RETRIES,
            min_value=0,
        ),
    )
