"""Shared FastAPI dependencies used across route modules."""

from functools import lru_cache
from typing import Optional

from basedlink.config import get_settings
from basedlink.generation import GenerationService
from basedlink.grant_service import GrantClient
from basedlink.llm_service import ChatCompletionClient, GrantChatClient, ProviderSelector
from basedlink.payment_gateway import PaymentConfigError, PaymentGateway
from basedlink.search_service import TavilySearchClient


@lru_cache(maxsize=1)
def get_generation_service() -> GenerationService:
    settings = get_settings()
    chat_client = ChatCompletionClient.from_settings(settings)
    return GenerationService(
        selector=ProviderSelector.from_settings(settings),
        chat_client=chat_client,
        grant_client=GrantChatClient(chat_client, settings.grant_api_url, settings.eigen_model),
        search_client=TavilySearchClient.from_settings(settings),
    )


@lru_cache(maxsize=1)
def get_grant_client() -> GrantClient:
    return GrantClient(get_settings().grant_api_url)


@lru_cache(maxsize=1)
def _build_payment_gateway() -> PaymentGateway:
    return PaymentGateway.from_settings(get_settings())


def get_payment_gateway() -> Optional[PaymentGateway]:
    """Gateway for the payment routes, or None when the facilitator is not configured."""
    try:
        return _build_payment_gateway()
    except PaymentConfigError:
        return None


def require_gateway(gateway: Optional[PaymentGateway]) -> PaymentGateway:
    if gateway is None:
        raise PaymentConfigError("Payment gateway is not configured")
    return gateway
