from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from basedlink.generation import GenerationService
from basedlink.llm_service import Completion, LLMRequestError, ModelProvider, ProviderSelector


Reply = Union[str, Completion, Exception, Callable[[str, str], Any]]


class FakeChatClient:
    """Scripted stand-in for ChatCompletionClient, keyed by provider name."""

    def __init__(self, replies: Optional[Dict[str, Reply]] = None, default: Reply = '["one item", "two item"]'):
        self.replies = replies or {}
        self.default = default
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, provider, prompt, model=None, temperature=0.8, max_tokens=None, stage="request", extra_body=None):
        self.calls.append({"provider": provider.name, "prompt": prompt, "model": model, "stage": stage})
        reply = self.replies.get(provider.name, self.default)
        if callable(reply):
            reply = reply(stage, prompt)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, Completion):
            return reply
        return Completion(content=reply)


class FakeGrantClient:
    def __init__(self, reply: Reply):
        self.reply = reply
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, grant, prompt, temperature=0.8, max_tokens=None, stage="request"):
        self.calls.append({"grant": grant, "stage": stage})
        if isinstance(self.reply, Exception):
            raise self.reply
        if isinstance(self.reply, Completion):
            return self.reply
        return Completion(content=self.reply)


class FakeSearchClient:
    def __init__(self, context: str = ""):
        self.context = context
        self.queries: List[str] = []

    async def build_research_context(self, query, max_results=2):
        self.queries.append(query)
        return self.context


def make_selector() -> ProviderSelector:
    primary = ModelProvider(name="eigen", base_url="https://eigen.test/v1", api_key="k", default_model="gpt-oss-120b-f16")
    secondary = ModelProvider(name="groq", base_url="https://groq.test/v1", api_key="k", default_model="llama-3.3-70b-versatile")
    return ProviderSelector(primary, secondary)


def provider_down(status: int = 500) -> LLMRequestError:
    return LLMRequestError("http_error", f"http={status}", status)


@pytest.fixture
def selector() -> ProviderSelector:
    return make_selector()


@pytest.fixture
def make_service(selector):
    def _make(chat=None, grant=None, search=None) -> GenerationService:
        return GenerationService(
            selector=selector,
            chat_client=chat or FakeChatClient(),
            grant_client=grant,
            search_client=search or FakeSearchClient(),
        )

    return _make
