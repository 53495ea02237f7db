"""Environment-driven settings for the BasedLink backend."""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict


# Load .env early so every module sees the same environment.
_PACKAGE_ENV = Path(__file__).resolve().parent.parent / ".env"
if _PACKAGE_ENV.exists():
    load_dotenv(dotenv_path=_PACKAGE_ENV, override=False)
else:
    load_dotenv(override=False)


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "https://frontend-zeta-smoky-96.vercel.app",
    "https://basedlink.vercel.app",
]

DEFAULT_MOCK_USDC_ADDRESS = "0xfD96ABdF9acb7Cde74D9DaC2D469d7717A80ee56"


def _env_str(name: str, default: str = "", *fallbacks: str) -> str:
    for key in (name,) + fallbacks:
        raw = os.getenv(key)
        if raw not in (None, ""):
            return raw.strip()
    return default


def _env_int(name: str, default: int, min_value: int, max_value: int) -> int:
    raw = os.getenv(name)
    try:
        value = int(raw) if raw not in (None, "") else default
    except Exception:
        value = default
    return max(min_value, min(max_value, value))


def _env_float(name: str, default: float, min_value: float, max_value: float) -> float:
    raw = os.getenv(name)
    try:
        value = float(raw) if raw not in (None, "") else default
    except Exception:
        value = default
    return max(min_value, min(max_value, value))


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name) or ""
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """Runtime configuration, one instance per process."""

    model_config = ConfigDict(protected_namespaces=())

    port: int = 4000
    log_level: str = "INFO"
    cors_origins: List[str] = DEFAULT_CORS_ORIGINS

    # Model providers
    eigen_api_key: str = ""
    eigen_base_url: str = "https://eigenai-sepolia.eigencloud.xyz/v1"
    eigen_model: str = "gpt-oss-120b-f16"
    groq_api_key: str = ""
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama-3.3-70b-versatile"
    grant_api_url: str = "https://determinal-api.eigenarcade.com"
    llm_timeout_sec: float = 75.0
    llm_max_retry_attempts: int = 2
    llm_retry_backoff_base_sec: float = 1.5

    # Research
    tavily_api_key: str = ""
    tavily_api_url: str = "https://api.tavily.com/search"

    # Chain
    rpc_url: str = "https://sepolia.base.org"
    facilitator_private_key: Optional[str] = None
    payment_contract_address: Optional[str] = None
    mock_usdc_address: str = DEFAULT_MOCK_USDC_ADDRESS
    chain_receipt_timeout_sec: int = 120

    @property
    def payment_configured(self) -> bool:
        return bool(self.facilitator_private_key and self.payment_contract_address)


def load_settings() -> Settings:
    cors_origins = list(DEFAULT_CORS_ORIGINS)
    for origin in _env_list("CORS_ORIGIN"):
        if origin not in cors_origins:
            cors_origins.append(origin)

    return Settings(
        port=_env_int("PORT", 4000, 1, 65535),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        cors_origins=cors_origins,
        eigen_api_key=_env_str("EIGEN_API_KEY"),
        eigen_base_url=_env_str("EIGEN_BASE_URL", "https://eigenai-sepolia.eigencloud.xyz/v1"),
        eigen_model=_env_str("EIGEN_MODEL", "gpt-oss-120b-f16"),
        groq_api_key=_env_str("GROQ_API_KEY"),
        groq_base_url=_env_str("GROQ_BASE_URL", "https://api.groq.com/openai/v1"),
        groq_model=_env_str("GROQ_MODEL", "llama-3.3-70b-versatile"),
        grant_api_url=_env_str("EIGEN_GRANT_API_URL", "https://determinal-api.eigenarcade.com"),
        llm_timeout_sec=_env_float("LLM_TIMEOUT_SEC", 75.0, 5.0, 300.0),
        llm_max_retry_attempts=_env_int("LLM_MAX_RETRY_ATTEMPTS", 2, 1, 6),
        llm_retry_backoff_base_sec=_env_float("LLM_RETRY_BACKOFF_BASE_SEC", 1.5, 0.1, 5.0),
        tavily_api_key=_env_str("TAVILY_API_KEY"),
        tavily_api_url=_env_str("TAVILY_API_URL", "https://api.tavily.com/search"),
        rpc_url=_env_str("BASE_SEPOLIA_RPC_URL", "https://sepolia.base.org", "RPC_URL"),
        facilitator_private_key=_env_str("FACILITATOR_PRIVATE_KEY", "", "PRIVATE_KEY") or None,
        payment_contract_address=_env_str("PAYMENT_CONTRACT_ADDRESS") or None,
        mock_usdc_address=_env_str("MOCK_USDC_ADDRESS", DEFAULT_MOCK_USDC_ADDRESS),
        chain_receipt_timeout_sec=_env_int("CHAIN_RECEIPT_TIMEOUT_SEC", 120, 10, 900),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def mask_secret(value: Optional[str]) -> str:
    """Show only the first 8 characters of an API key."""
    if not value:
        return "MISSING"
    return value[:8] + "..."
