import asyncio
import json

import httpx
import pytest

from basedlink.llm_service import (
    ChatCompletionClient,
    GrantAuth,
    GrantChatClient,
    LLMRequestError,
    ModelProvider,
    ProviderSelector,
    parse_retry_after,
)


def _provider(**kwargs):
    defaults = dict(
        name="eigen",
        base_url="https://eigen.test/v1/",
        api_key="sk-eigen",
        default_model="gpt-oss-120b-f16",
        model_aliases={"qwen": "meta-llama-3-1-8b-instruct-q3", "gpt-oss": "gpt-oss-120b-f16"},
    )
    defaults.update(kwargs)
    return ModelProvider(**defaults)


def _completion_body(content, signature=None):
    body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if signature:
        body["signature"] = signature
    return body


def _client(handler, **kwargs):
    kwargs.setdefault("retry_backoff_base_sec", 0.01)
    return ChatCompletionClient(transport=httpx.MockTransport(handler), **kwargs)


def test_resolve_model_id():
    provider = _provider()
    assert provider.resolve_model_id("Qwen 8B") == "meta-llama-3-1-8b-instruct-q3"
    assert provider.resolve_model_id("gpt-oss-120b") == "gpt-oss-120b-f16"
    assert provider.resolve_model_id("something-else") == "gpt-oss-120b-f16"
    assert provider.resolve_model_id(None) == "gpt-oss-120b-f16"
    groq = _provider(name="groq", default_model="llama-3.3-70b-versatile", model_aliases={})
    assert groq.resolve_model_id("qwen") == "llama-3.3-70b-versatile"


def test_complete_posts_openai_payload_and_returns_signature():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion_body('  ["a", "b"]  ', signature="0xsig"))

    completion = asyncio.run(
        _client(handler).complete(_provider(), "prompt text", model="qwen", temperature=0.5, max_tokens=100)
    )

    assert completion.content == '["a", "b"]'
    assert completion.signature == "0xsig"
    assert seen["url"] == "https://eigen.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-eigen"
    assert seen["body"]["model"] == "meta-llama-3-1-8b-instruct-q3"
    assert seen["body"]["messages"] == [{"role": "user", "content": "prompt text"}]
    assert seen["body"]["temperature"] == 0.5
    assert seen["body"]["max_tokens"] == 100


def test_auth_failure_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(401, json={"error": "bad key"})

    with pytest.raises(LLMRequestError) as exc_info:
        asyncio.run(_client(handler, max_retry_attempts=3).complete(_provider(), "p"))
    assert exc_info.value.error_type == "auth_error"
    assert exc_info.value.status_code == 401
    assert len(calls) == 1


def test_server_error_is_retried_then_succeeds():
    responses = [httpx.Response(503), httpx.Response(200, json=_completion_body("ok"))]

    def handler(request):
        return responses.pop(0)

    completion = asyncio.run(_client(handler, max_retry_attempts=2).complete(_provider(), "p"))
    assert completion.content == "ok"
    assert completion.signature is None


def test_rate_limit_exhausts_retries():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429, headers={"retry-after": "0"})

    with pytest.raises(LLMRequestError) as exc_info:
        asyncio.run(_client(handler, max_retry_attempts=2).complete(_provider(), "p"))
    assert exc_info.value.error_type == "rate_limit"
    assert len(calls) == 2


def test_transport_error_becomes_request_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LLMRequestError) as exc_info:
        asyncio.run(_client(handler).complete(_provider(), "p"))
    assert exc_info.value.error_type == "exception"


def test_parse_retry_after_headers():
    request = httpx.Request("POST", "https://x.test")
    assert parse_retry_after(httpx.Response(429, headers={"retry-after": "3"}, request=request)) == 3.0
    resp = httpx.Response(429, headers={"x-ratelimit-reset-tokens": "1m26.4s"}, request=request)
    assert parse_retry_after(resp) == pytest.approx(86.4)
    resp = httpx.Response(429, headers={"x-ratelimit-reset-requests": "305ms"}, request=request)
    assert parse_retry_after(resp) == pytest.approx(0.305)
    assert parse_retry_after(httpx.Response(429, request=request), default=5.0) == 5.0


def test_grant_client_sends_grant_fields():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion_body("granted", signature="0xattest"))

    grant_client = GrantChatClient(_client(handler), "https://grant.test/", "gpt-oss-120b-f16")
    grant = GrantAuth(wallet_address="0xabc", grant_message="msg", grant_signature="0xsig")
    completion = asyncio.run(grant_client.complete(grant, "prompt", max_tokens=50))

    assert completion.content == "granted"
    assert completion.signature == "0xattest"
    assert seen["url"] == "https://grant.test/api/chat/completions"
    assert "authorization" not in seen["headers"]
    assert seen["body"]["grantMessage"] == "msg"
    assert seen["body"]["grantSignature"] == "0xsig"
    assert seen["body"]["walletAddress"] == "0xabc"
    assert seen["body"]["max_tokens"] == 50


def test_selector_switch_is_idempotent():
    selector = ProviderSelector(_provider(), _provider(name="groq"))
    assert selector.current.name == "eigen"
    assert not selector.using_secondary
    selector.switch_to_secondary()
    selector.switch_to_secondary()
    assert selector.using_secondary
    assert selector.current.name == "groq"
