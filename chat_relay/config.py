"""Chat Relay — settings loaded from the environment (and an optional .env file)."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from chat_relay.exceptions import StartupConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
DEFAULT_STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")

# Fixed generation config; never derived from the request.
MODEL = "deepseek-ai/DeepSeek-V3-0324"
PROVIDER = "fireworks-ai"
TEMPERATURE = 0.4
MAX_TOKENS = 512
TOP_P = 0.7

HF_BASE_URL = "https://router.huggingface.co/v1"


class Settings(BaseModel):
    hf_token: str
    port: int = DEFAULT_PORT
    model: str = MODEL
    provider: str = PROVIDER
    temperature: float = TEMPERATURE
    max_tokens: int = MAX_TOKENS
    top_p: float = TOP_P
    base_url: str = HF_BASE_URL
    upstream_timeout: Optional[float] = 60.0
    static_dir: str = DEFAULT_STATIC_DIR
    log_level: str = "INFO"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    """Empty or zero disables the upstream timeout."""
    if raw is None:
        return 60.0
    raw = raw.strip()
    if not raw:
        return None
    value = float(raw)
    return value if value > 0 else None


def load_settings(env_file: Optional[str] = None) -> Settings:
    load_dotenv(env_file or os.path.join(os.getcwd(), ".env"))

    hf_token = os.getenv("HF_TOKEN", "").strip()
    if not hf_token:
        logger.critical("FATAL ERROR: Hugging Face token (HF_TOKEN) environment variable not found!")
        raise StartupConfigurationError("HF_TOKEN environment variable is not set. Add it to your .env file.")

    return Settings(
        hf_token=hf_token,
        port=int(os.getenv("PORT") or DEFAULT_PORT),
        base_url=os.getenv("HF_BASE_URL", HF_BASE_URL),
        upstream_timeout=_parse_timeout(os.getenv("UPSTREAM_TIMEOUT")),
        static_dir=os.getenv("STATIC_DIR", DEFAULT_STATIC_DIR),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
