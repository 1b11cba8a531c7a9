import json
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from dotenv import dotenv_values

from .logging import get_logger

log = get_logger("config")

DEFAULT_DASHSCOPE_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
DEFAULT_VISION_MODEL = "qwen-vl-plus"
DEFAULT_OCR_TIMEOUT = 120
KNOWN_MERCHANTS_FILENAME = "known_merchants.json"


@dataclass(frozen=True)
class VisionConfig:
    """Settings required to talk to the vision OCR endpoint."""

    api_key: Optional[str]
    base_url: str = DEFAULT_DASHSCOPE_BASE_URL
    model_name: str = DEFAULT_VISION_MODEL
    timeout_seconds: int = DEFAULT_OCR_TIMEOUT
    temperature: float = 0.1


def _find_upwards(start_dir: str, filename: str) -> Optional[str]:
    """Return first matching file found when walking up from start_dir.

    This makes running tools from subdirectories (e.g., `src/`) still find
    repository-level files like `.env` and `known_merchants.json`.
    """
    d = os.path.abspath(start_dir or ".")
    while True:
        candidate = os.path.join(d, filename)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(d)
        if parent == d:
            return None
        d = parent


def _read_dotenv(dotenv_dir: str) -> Dict[str, str]:
    """Return key/value pairs from the nearest .env without touching os.environ."""
    path = _find_upwards(dotenv_dir, ".env")
    if not path:
        log.debug(f"No .env found starting from: {os.path.abspath(dotenv_dir)}")
        return {}
    values = dotenv_values(path, encoding="utf-8")
    env = {k: v.strip() for k, v in values.items() if k and v is not None}
    log.debug(f"Loaded {len(env)} key(s) from .env at {path}")
    return env


def _lookup(env: Dict[str, str], *names: str) -> Optional[str]:
    for name in names:
        v = os.environ.get(name)
        if v and v.strip():
            return v.strip()
    for name in names:
        v = env.get(name)
        if v:
            return v
    return None


def load_vision(dotenv_dir: str) -> VisionConfig:
    """Return the OCR endpoint settings from env or .env.

    The API key is read from ALIBABA_CLOUD_API_KEY, then DASHSCOPE_API_KEY.
    A missing key is not an error here; the transcriber refuses to run.
    """
    env = _read_dotenv(dotenv_dir)
    api_key = _lookup(env, "ALIBABA_CLOUD_API_KEY", "DASHSCOPE_API_KEY")
    if api_key:
        log.info("Vision API key found")
    else:
        log.debug("No vision API key in env or .env")

    timeout_raw = _lookup(env, "OCR_TIMEOUT")
    timeout = DEFAULT_OCR_TIMEOUT
    if timeout_raw:
        try:
            timeout = max(1, int(timeout_raw))
        except ValueError:
            log.warning(f"OCR_TIMEOUT={timeout_raw!r} is not an integer; using {DEFAULT_OCR_TIMEOUT}s")

    return VisionConfig(
        api_key=api_key,
        base_url=_lookup(env, "DASHSCOPE_BASE_URL") or DEFAULT_DASHSCOPE_BASE_URL,
        model_name=_lookup(env, "QWEN_VL_MODEL") or DEFAULT_VISION_MODEL,
        timeout_seconds=timeout,
    )


def _merchant_names(data: object) -> List[str]:
    if isinstance(data, dict):
        inner = data.get("merchants")
        data = inner if isinstance(inner, list) else list(data.keys())
    if not isinstance(data, list):
        return []
    seen = set()
    names: List[str] = []
    for entry in data:
        if not isinstance(entry, str):
            continue
        name = entry.strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        names.append(name)
    return names


def load_known_merchants(start_dir: str, filename: str = KNOWN_MERCHANTS_FILENAME) -> List[str]:
    """Return the household's confirmed merchant names, or [] when none are configured.

    Accepts a JSON list of names, an object keyed by name, or
    ``{"merchants": [...]}``. Blank and case-insensitive duplicate names are dropped.
    """
    path = filename if os.path.isabs(filename) else _find_upwards(start_dir, filename)
    if not path or not os.path.isfile(path):
        log.info(f"No {os.path.basename(filename)} found; proceeding without known merchants")
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning(f"Failed to read {path}: {e}")
        return []
    names = _merchant_names(data)
    log.info(f"Loaded {len(names)} known merchant(s) from {path}")
    return names
