import os

from dotenv import find_dotenv, load_dotenv

from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import ACCOUNT_TYPES

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"
STORE_FILENAME = "ledger.json"

_CONFIG_FILE_PATH: str | None = None
_CONFIG_FILE_VALUES: dict[str, str] = {}

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "LOG_COLOUR",
    "DATA_DIR",
    "HEURISTIC_KEYWORDS",
    "PREDICTION_LIMIT",
    "HOST",
    "PORT",
)


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    resolved = find_dotenv(usecwd=True)
    return resolved or None


def _resolve_config_path() -> str:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return os.path.join(config_dir, CONFIG_FILENAME)
    cwd = os.getcwd()
    candidate = os.path.join(cwd, "config", CONFIG_FILENAME)
    if os.path.exists(candidate):
        return candidate
    return os.path.join(cwd, CONFIG_FILENAME)


def _unquote_value(raw_value: str) -> str:
    if len(raw_value) >= 2 and raw_value[0] == raw_value[-1] and raw_value[0] in {'"', "'"}:
        return raw_value[1:-1]
    return raw_value


def read_config_file(path: str | None) -> dict[str, str]:
    """Read a flat ``KEY: value`` file. Nested YAML is not supported."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            key = key.strip()
            value = _unquote_value(raw_value.split(" #", 1)[0].strip())
            if key and value:
                values[key] = value
    return values


def load_environment() -> None:
    global _CONFIG_FILE_PATH
    global _CONFIG_FILE_VALUES

    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _CONFIG_FILE_PATH = _resolve_config_path()
    _CONFIG_FILE_VALUES = read_config_file(_CONFIG_FILE_PATH)

    for key in _CONFIG_KEYS:
        if key not in os.environ and key in _CONFIG_FILE_VALUES:
            os.environ[key] = _CONFIG_FILE_VALUES[key]


def get_config_path() -> str | None:
    return _CONFIG_FILE_PATH


def ensure_dirs(*paths: str | None) -> None:
    for path in paths:
        if path and path not in {".", "./"}:
            os.makedirs(path, exist_ok=True)


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def parse_keyword_table(raw: str | None) -> dict[str, tuple[str, float]]:
    """Parse ``word:type:confidence`` entries separated by commas.

    Malformed entries are skipped with a warning.
    """
    table: dict[str, tuple[str, float]] = {}
    if not raw:
        return table
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        parts = [part.strip() for part in entry.split(":")]
        if len(parts) != 3:
            logger.warning("[ENV] Ignoring keyword entry '%s' (expected word:type:confidence).", entry)
            continue
        word, account_type, raw_confidence = parts
        try:
            confidence = float(raw_confidence)
        except ValueError:
            logger.warning("[ENV] Ignoring keyword entry '%s' (bad confidence).", entry)
            continue
        if account_type not in ACCOUNT_TYPES or not 0.0 <= confidence <= 1.0 or not word:
            logger.warning("[ENV] Ignoring keyword entry '%s'.", entry)
            continue
        table[word.lower()] = (account_type, confidence)
    return table


def get_keyword_table() -> dict[str, tuple[str, float]] | None:
    """Keyword table override from ``HEURISTIC_KEYWORDS``, or None for the default."""
    table = parse_keyword_table(os.getenv("HEURISTIC_KEYWORDS"))
    return table or None


_SENSITIVE_ENV_KEYS = (
    "KEY",
    "TOKEN",
    "SECRET",
    "PASSWORD",
)


def _mask_env_value(name: str, value: str) -> str:
    sanitized = value.replace("\r", "\\r").replace("\n", "\\n")
    if not any(marker in name.upper() for marker in _SENSITIVE_ENV_KEYS):
        return sanitized
    if len(sanitized) <= 4:
        return "****"
    return f"{sanitized[:2]}...{sanitized[-2:]}"


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables (masked where needed).")
    for key in _CONFIG_KEYS:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else _mask_env_value(key, raw_value)
        logger.info("[ENV] %s=%s", key, value)


DEFAULT_PREDICTION_LIMIT = 5
DEFAULT_PORT = 8000


load_environment()

DATA_DIR = os.getenv("DATA_DIR", ".")
LOG_DIR = os.getenv("LOG_DIR")
CONFIG_DIR = os.getenv("CONFIG_DIR")

ensure_dirs(DATA_DIR, LOG_DIR, CONFIG_DIR)

PREDICTION_LIMIT = get_env_int("PREDICTION_LIMIT", DEFAULT_PREDICTION_LIMIT, min_value=1)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = get_env_int("PORT", DEFAULT_PORT, min_value=1)
STORE_PATH = os.path.join(DATA_DIR, STORE_FILENAME)
