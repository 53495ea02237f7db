import asyncio

import pytest

from basedlink.generation import DEFAULT_BODY_RESULT, DEFAULT_CTAS, DEFAULT_TOPIC_INPUT
from basedlink.llm_service import Completion, GrantAuth, LLMRequestError

from conftest import FakeChatClient, FakeGrantClient, FakeSearchClient, provider_down


STAGE_REPLIES = {
    "topics": '["Topic A", "Topic B"]',
    "hooks": '["Hook A", "Hook B"]',
    "body": '["Body A text", "Body B text"]',
    "cta": '["CTA A", "CTA B"]',
    "polish": "Polished post",
}


def by_stage(stage, prompt):
    return STAGE_REPLIES[stage]


def test_topics_from_primary_provider(make_service, selector):
    chat = FakeChatClient(default='```json\n["AI di kantor", "Remote work"]\n```')
    response = asyncio.run(make_service(chat).generate_topics("kerja", model="gpt-oss"))

    assert response.result == ["AI di kantor", "Remote work"]
    assert response.signature is None
    assert [c["provider"] for c in chat.calls] == ["eigen"]
    assert chat.calls[0]["model"] == "gpt-oss"
    assert not selector.using_secondary


def test_primary_failure_switches_to_secondary_for_good(make_service, selector):
    chat = FakeChatClient(replies={"eigen": provider_down(503)}, default='["From groq one", "From groq two"]')
    service = make_service(chat)

    first = asyncio.run(service.generate_topics("kerja"))
    second = asyncio.run(service.generate_hooks("kerja"))

    assert first.result == ["From groq one", "From groq two"]
    assert second.result == ["From groq one", "From groq two"]
    assert selector.using_secondary
    assert [c["provider"] for c in chat.calls] == ["eigen", "groq", "groq"]


def test_switch_happens_once_under_concurrent_failures(make_service, selector):
    chat = FakeChatClient(replies={"eigen": provider_down()}, default='["ok one", "ok two"]')
    service = make_service(chat)

    async def run_all():
        return await asyncio.gather(*(service.generate_topics(f"t{i}") for i in range(5)))

    results = asyncio.run(run_all())
    assert all(r.result == ["ok one", "ok two"] for r in results)
    assert selector.current.name == "groq"


def test_all_providers_down_returns_stage_defaults(make_service):
    chat = FakeChatClient(default=provider_down())
    service = make_service(chat)

    assert asyncio.run(service.generate_topics("Kopi")).result == ["Kopi"]
    assert asyncio.run(service.generate_topics("   ")).result == [DEFAULT_TOPIC_INPUT]
    assert asyncio.run(service.generate_hooks("Kopi")).result == ["Kopi is important because..."]
    assert asyncio.run(service.generate_body("hook", "ctx")).result == [DEFAULT_BODY_RESULT]
    assert asyncio.run(service.generate_cta("body")).result == DEFAULT_CTAS
    assert asyncio.run(service.polish_content("my draft")).result == "my draft"


def test_secondary_failure_is_not_retried(make_service, selector):
    selector.switch_to_secondary()
    chat = FakeChatClient(replies={"groq": provider_down()})
    response = asyncio.run(make_service(chat).generate_cta("body"))

    assert response.result == DEFAULT_CTAS
    assert [c["provider"] for c in chat.calls] == ["groq"]


def test_empty_reply_uses_stage_default(make_service):
    chat = FakeChatClient(default="")
    assert asyncio.run(make_service(chat).generate_topics("Kopi")).result == ["Kopi"]


def test_signature_is_passed_through(make_service):
    chat = FakeChatClient(default=Completion(content='["One topic", "Two topic"]', signature="0xattested"))
    response = asyncio.run(make_service(chat).generate_topics("x"))
    assert response.signature == "0xattested"


def test_grant_provider_is_tried_first(make_service):
    chat = FakeChatClient()
    grant_client = FakeGrantClient(Completion(content='["Granted one", "Granted two"]', signature="0xg"))
    grant = GrantAuth(wallet_address="0xabc", grant_message="m", grant_signature="s")

    response = asyncio.run(make_service(chat, grant=grant_client).generate_hooks("t", grant=grant))

    assert response.result == ["Granted one", "Granted two"]
    assert response.signature == "0xg"
    assert chat.calls == []
    assert grant_client.calls[0]["stage"] == "hooks"


def test_grant_failure_falls_back_to_configured_provider(make_service):
    chat = FakeChatClient(default='["Plain one", "Plain two"]')
    grant_client = FakeGrantClient(LLMRequestError("auth_error", "http=401", 401))
    grant = GrantAuth(grant_message="m")

    response = asyncio.run(make_service(chat, grant=grant_client).generate_topics("t", grant=grant))

    assert response.result == ["Plain one", "Plain two"]
    assert len(grant_client.calls) == 1
    assert [c["provider"] for c in chat.calls] == ["eigen"]


def test_body_prompt_uses_research_and_options(make_service):
    chat = FakeChatClient(default='["Body one text", "Body two text"]')
    search = FakeSearchClient("- Source: useful fact")
    service = make_service(chat, search=search)

    response = asyncio.run(
        service.generate_body("My hook", "My topic", "viral", "short", tone=9, emoji_density=0, language="en")
    )

    assert response.result == ["Body one text", "Body two text"]
    assert search.queries == ["My topic"]
    prompt = chat.calls[0]["prompt"]
    assert "- Source: useful fact" in prompt
    assert "SHORT & PUNCHY" in prompt
    assert "SOCIAL & CONVERSATIONAL" in prompt
    assert "EMOJI USAGE: NONE" in prompt
    assert "LANGUAGE: ENGLISH" in prompt
    assert "[Example 1 - Style Reference]" in prompt


def test_body_research_falls_back_to_hook_query(make_service):
    search = FakeSearchClient()
    asyncio.run(make_service(search=search).generate_body("Only hook", ""))
    assert search.queries == ["Only hook"]


def test_polish_returns_text(make_service):
    chat = FakeChatClient(default=Completion(content="Polished!", signature="0xp"))
    response = asyncio.run(make_service(chat).polish_content("draft", 8, 5))
    assert response.result == "Polished!"
    assert response.signature == "0xp"
    assert chat.calls[0]["stage"] == "polish"


def test_tier_one_content(make_service):
    chat = FakeChatClient(default=by_stage)
    content = asyncio.run(make_service(chat).generate_tiered_content(1, "linkid-1"))

    assert content == {
        "tier": 1,
        "topic": "Topic A",
        "hook": "Hook A",
        "body": "Body A text",
        "status": "completed",
    }
    assert [c["stage"] for c in chat.calls] == ["topics", "hooks", "body"]
    assert "SHORT & PUNCHY" in chat.calls[2]["prompt"]


def test_tier_two_content(make_service):
    chat = FakeChatClient(default=by_stage)
    content = asyncio.run(make_service(chat).generate_tiered_content(2, "linkid-2"))

    assert content == {
        "tier": 2,
        "topic": "Topic A",
        "hooks": ["Hook A", "Hook B"],
        "bodyOptions": ["Body A text", "Body B text"],
        "status": "completed",
    }


def test_tier_three_content(make_service):
    chat = FakeChatClient(default=by_stage)
    content = asyncio.run(make_service(chat).generate_tiered_content(3, "linkid-3"))

    assert content == {
        "tier": 3,
        "topic": "Topic A",
        "hooks": ["Hook A", "Hook B"],
        "bodies": ["Body A text", "Body B text"],
        "ctas": ["CTA A", "CTA B"],
        "finalPolished": "Polished post",
        "status": "completed",
    }
    assert [c["stage"] for c in chat.calls] == ["topics", "hooks", "body", "cta", "polish"]
    assert "LONG FORM" in chat.calls[2]["prompt"]


def test_tiered_content_rejects_unknown_tier(make_service):
    with pytest.raises(ValueError):
        asyncio.run(make_service().generate_tiered_content(4, "linkid-4"))
