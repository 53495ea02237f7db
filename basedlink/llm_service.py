"""
Chat-completion client for the OpenAI-compatible model providers.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from basedlink.config import Settings, mask_secret


logger = logging.getLogger("basedlink.llm")

RETRYABLE_STATUS = (429, 500, 502, 503, 504)

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


class LLMRequestError(Exception):
    """A model provider call that did not produce a completion."""

    def __init__(self, error_type: str, detail: str = "", status_code: Optional[int] = None):
        super().__init__(f"{error_type}: {detail}" if detail else error_type)
        self.error_type = error_type
        self.detail = detail
        self.status_code = status_code


class ModelProvider(BaseModel):
    """Connection details for one OpenAI-compatible provider."""

    model_config = ConfigDict(protected_namespaces=())

    name: str
    base_url: str
    api_key: str = ""
    default_model: str
    # substring of the UI model name -> provider model id
    model_aliases: Dict[str, str] = Field(default_factory=dict)

    def resolve_model_id(self, model_name: Optional[str] = None) -> str:
        if not model_name or not self.model_aliases:
            return self.default_model
        lowered = model_name.lower()
        for needle, model_id in self.model_aliases.items():
            if needle in lowered:
                return model_id
        return self.default_model


class Completion(BaseModel):
    content: str = ""
    # Opaque attestation some providers attach to the completion.
    signature: Optional[str] = None


class GrantAuth(BaseModel):
    """Signed grant forwarded as a bearer credential to the grant provider."""

    wallet_address: Optional[str] = None
    grant_message: str
    grant_signature: Optional[str] = None


class ProviderSelector:
    """Primary/secondary provider choice shared by every request of the app.

    Once switched to the secondary provider it stays there until restart.
    Switching is idempotent, so concurrent failures may all call it.
    """

    def __init__(self, primary: ModelProvider, secondary: ModelProvider):
        self.primary = primary
        self.secondary = secondary
        self._using_secondary = False

    @property
    def using_secondary(self) -> bool:
        return self._using_secondary

    @property
    def current(self) -> ModelProvider:
        return self.secondary if self._using_secondary else self.primary

    def switch_to_secondary(self) -> None:
        if not self._using_secondary:
            logger.warning(
                "Switching to %s fallback due to %s error", self.secondary.name, self.primary.name
            )
            self._using_secondary = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderSelector":
        primary = ModelProvider(
            name="eigen",
            base_url=settings.eigen_base_url,
            api_key=settings.eigen_api_key or "placeholder",
            default_model=settings.eigen_model,
            model_aliases={
                "gpt-oss": "gpt-oss-120b-f16",
                "eigen": "gpt-oss-120b-f16",
                "qwen": "meta-llama-3-1-8b-instruct-q3",
            },
        )
        secondary = ModelProvider(
            name="groq",
            base_url=settings.groq_base_url,
            api_key=settings.groq_api_key,
            default_model=settings.groq_model,
        )
        logger.info("Eigen config: base_url=%s api_key=%s", primary.base_url, mask_secret(settings.eigen_api_key))
        logger.info("Groq config: base_url=%s api_key=%s", secondary.base_url, mask_secret(settings.groq_api_key))
        return cls(primary, secondary)


def parse_retry_after(response: httpx.Response, default: float = 2.0) -> float:
    """Extract wait time from rate-limit headers."""
    ra = response.headers.get("retry-after", "")
    if ra:
        try:
            return float(ra)
        except ValueError:
            pass
    # x-ratelimit-reset-* look like "1m26.4s", "305ms", "6.5s"
    for hdr in ("x-ratelimit-reset-tokens", "x-ratelimit-reset-requests"):
        val = response.headers.get(hdr, "")
        if not val:
            continue
        total = 0.0
        for amount, unit in _DURATION_PART_RE.findall(val):
            total += float(amount) * _DURATION_UNITS[unit]
        if total > 0:
            return total
    return default


def _extract_completion(payload: Any) -> Completion:
    if not isinstance(payload, dict):
        raise LLMRequestError("bad_response", "completion payload is not an object")
    choices = payload.get("choices") or []
    content = ""
    if choices and isinstance(choices[0], dict):
        message = choices[0].get("message") or {}
        content = (message.get("content") or "").strip()
    signature = payload.get("signature")
    return Completion(content=content, signature=str(signature) if signature else None)


class ChatCompletionClient:
    """Calls `POST {base_url}/chat/completions` on a provider."""

    def __init__(
        self,
        timeout: float = 75.0,
        max_retry_attempts: int = 2,
        retry_backoff_base_sec: float = 1.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.max_retry_attempts = max(1, max_retry_attempts)
        self.retry_backoff_base_sec = retry_backoff_base_sec
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatCompletionClient":
        return cls(
            timeout=settings.llm_timeout_sec,
            max_retry_attempts=settings.llm_max_retry_attempts,
            retry_backoff_base_sec=settings.llm_retry_backoff_base_sec,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def post_completion(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Dict[str, str],
        stage: str,
    ) -> Completion:
        model = payload.get("model", "")
        async with self._client() as client:
            for attempt in range(self.max_retry_attempts):
                try:
                    response = await client.post(url, json=payload, headers=headers)
                except httpx.HTTPError as exc:
                    logger.warning("stage=%s status=error model=%s detail=%s", stage, model, exc)
                    raise LLMRequestError("exception", str(exc)[:200]) from exc

                if response.status_code == 200:
                    logger.info("stage=%s status=ok model=%s detail=attempt=%d http=200", stage, model, attempt + 1)
                    try:
                        return _extract_completion(response.json())
                    except ValueError as exc:
                        raise LLMRequestError("bad_response", str(exc)[:200], 200) from exc

                if response.status_code in RETRYABLE_STATUS and attempt < self.max_retry_attempts - 1:
                    if response.status_code == 429:
                        backoff = max(parse_retry_after(response), self.retry_backoff_base_sec * (2 ** attempt))
                    else:
                        backoff = self.retry_backoff_base_sec * (attempt + 1)
                    logger.info(
                        "stage=%s status=retry model=%s detail=attempt=%d http=%d backoff=%.1fs",
                        stage, model, attempt + 1, response.status_code, backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue

                logger.warning(
                    "stage=%s status=fail model=%s detail=attempt=%d http=%d",
                    stage, model, attempt + 1, response.status_code,
                )
                error_type = "rate_limit" if response.status_code == 429 else "http_error"
                if response.status_code in (401, 403):
                    error_type = "auth_error"
                raise LLMRequestError(error_type, f"http={response.status_code}", response.status_code)

        raise LLMRequestError("exhausted", f"no completion after {self.max_retry_attempts} attempts")

    async def complete(
        self,
        provider: ModelProvider,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.8,
        max_tokens: Optional[int] = None,
        stage: str = "request",
        extra_body: Optional[Dict[str, Any]] = None,
    ) -> Completion:
        messages: List[Dict[str, str]] = [{"role": "user", "content": prompt}]
        payload: Dict[str, Any] = {
            "model": provider.resolve_model_id(model),
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if extra_body:
            payload.update(extra_body)

        logger.info("stage=%s status=start model=%s detail=provider=%s", stage, payload["model"], provider.name)
        return await self.post_completion(
            f"{provider.base_url.rstrip('/')}/chat/completions",
            payload,
            {
                "Authorization": f"Bearer {provider.api_key}",
                "Content-Type": "application/json",
            },
            stage,
        )


class GrantChatClient:
    """Grant-authenticated completions: the signed grant replaces an API key."""

    def __init__(self, chat_client: ChatCompletionClient, grant_api_url: str, default_model: str):
        self.chat_client = chat_client
        self.grant_api_url = grant_api_url.rstrip("/")
        self.default_model = default_model

    async def complete(
        self,
        grant: GrantAuth,
        prompt: str,
        temperature: float = 0.8,
        max_tokens: Optional[int] = None,
        stage: str = "request",
    ) -> Completion:
        payload: Dict[str, Any] = {
            "model": self.default_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "grantMessage": grant.grant_message,
            "grantSignature": grant.grant_signature,
            "walletAddress": grant.wallet_address,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        logger.info("stage=%s status=start model=%s detail=provider=grant wallet=%s", stage, self.default_model, grant.wallet_address)
        return await self.chat_client.post_completion(
            f"{self.grant_api_url}/api/chat/completions",
            payload,
            {"Content-Type": "application/json"},
            stage,
        )
