"""
Content pipeline: topics -> hooks -> body -> CTA -> polish.

Every stage asks a model provider for candidates, normalizes the reply into a
list of strings and degrades to a fixed placeholder when the providers fail.
"""

import logging
from typing import Any, Dict, List, Optional

from basedlink.llm_service import (
    ChatCompletionClient,
    Completion,
    GrantAuth,
    GrantChatClient,
    LLMRequestError,
    ProviderSelector,
)
from basedlink.prompts import (
    EmojiLevel,
    build_body_prompt,
    build_cta_prompt,
    build_hooks_prompt,
    build_polish_prompt,
    build_topics_prompt,
)
from basedlink.schemas import AIResponse
from basedlink.search_service import TavilySearchClient
from basedlink.text_utils import clip_text, normalize_list_response
from basedlink.viral_posts import get_viral_context


logger = logging.getLogger("basedlink.generation")

DEFAULT_TOPIC_INPUT = "LinkedIn post idea"
DEFAULT_BODY_RESULT = "Error generating body. Please try again."
DEFAULT_CTAS = [
    "Bagaimana menurut kalian?",
    "Setuju? 👇",
    "Share pengalaman kalian!",
    "Thoughts?",
]

TIERED_INPUT = "AI in Marketing"
TIERED_INTENT = "educational"
TIER_BODY_LENGTH = {1: "short", 2: "medium", 3: "long"}
TIER3_POLISH_TONE = 8
TIER3_POLISH_EMOJI = 5


class GenerationService:
    def __init__(
        self,
        selector: ProviderSelector,
        chat_client: ChatCompletionClient,
        grant_client: Optional[GrantChatClient] = None,
        search_client: Optional[TavilySearchClient] = None,
    ):
        self.selector = selector
        self.chat_client = chat_client
        self.grant_client = grant_client
        self.search_client = search_client

    async def _complete(
        self,
        stage: str,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.8,
        max_tokens: Optional[int] = None,
        grant: Optional[GrantAuth] = None,
    ) -> Completion:
        """Grant provider first, then the selected provider with one fallback retry."""
        if grant is not None and self.grant_client is not None:
            try:
                return await self.grant_client.complete(
                    grant, prompt, temperature=temperature, max_tokens=max_tokens, stage=stage
                )
            except LLMRequestError as exc:
                logger.warning("Grant provider failed at %s, using configured provider: %s", stage, exc)

        provider = self.selector.current
        try:
            return await self.chat_client.complete(
                provider, prompt, model=model, temperature=temperature, max_tokens=max_tokens, stage=stage
            )
        except LLMRequestError as exc:
            logger.error("AI Error (%s): %s", stage, exc)
            if provider is not self.selector.primary:
                raise
            self.selector.switch_to_secondary()

        return await self.chat_client.complete(
            self.selector.current, prompt, model=model, temperature=temperature, max_tokens=max_tokens, stage=stage
        )

    async def _list_stage(
        self,
        stage: str,
        prompt: str,
        default: List[str],
        model: Optional[str],
        temperature: float,
        max_tokens: int,
        grant: Optional[GrantAuth],
    ) -> AIResponse:
        try:
            completion = await self._complete(
                stage, prompt, model=model, temperature=temperature, max_tokens=max_tokens, grant=grant
            )
        except LLMRequestError as exc:
            logger.error("AI Error (%s), returning default result: %s", stage, exc)
            return AIResponse(result=default)

        result = normalize_list_response(completion.content, fallback=default[0])
        return AIResponse(result=result, signature=completion.signature)

    async def generate_topics(
        self,
        user_input: str,
        model: Optional[str] = None,
        grant: Optional[GrantAuth] = None,
    ) -> AIResponse:
        topic_input = (user_input or "").strip() or DEFAULT_TOPIC_INPUT
        return await self._list_stage(
            "topics",
            build_topics_prompt(topic_input),
            [topic_input],
            model,
            temperature=0.8,
            max_tokens=2500,
            grant=grant,
        )

    async def generate_hooks(
        self,
        topic: str,
        intent: str = "viral",
        model: Optional[str] = None,
        grant: Optional[GrantAuth] = None,
    ) -> AIResponse:
        topic = (topic or "").strip() or DEFAULT_TOPIC_INPUT
        return await self._list_stage(
            "hooks",
            build_hooks_prompt(topic, intent or "viral"),
            [f"{topic} is important because..."],
            model,
            temperature=0.85,
            max_tokens=2500,
            grant=grant,
        )

    async def generate_body(
        self,
        hook: str,
        context: str,
        intent: str = "viral",
        length: str = "medium",
        model: Optional[str] = None,
        grant: Optional[GrantAuth] = None,
        tone: float = 5,
        emoji_density: EmojiLevel = "moderate",
        language: str = "id",
    ) -> AIResponse:
        research_context = ""
        if self.search_client is not None:
            research_context = await self.search_client.build_research_context(context or hook)

        style_examples = [post["body"] for post in get_viral_context(2, intent, length)]
        prompt = build_body_prompt(
            hook,
            context,
            intent,
            length,
            research_context=research_context,
            style_examples=style_examples,
            tone=tone,
            emoji_density=emoji_density,
            language=language,
        )
        response = await self._list_stage(
            "body",
            prompt,
            [DEFAULT_BODY_RESULT],
            model,
            temperature=0.85,
            max_tokens=3500,
            grant=grant,
        )
        if isinstance(response.result, list) and response.result:
            logger.debug("Body response preview: %s", clip_text(response.result[0], 100))
        return response

    async def generate_cta(
        self,
        body: str,
        intent: str = "viral",
        model: Optional[str] = None,
        grant: Optional[GrantAuth] = None,
    ) -> AIResponse:
        return await self._list_stage(
            "cta",
            build_cta_prompt(body, intent),
            list(DEFAULT_CTAS),
            model,
            temperature=0.75,
            max_tokens=1500,
            grant=grant,
        )

    async def polish_content(
        self,
        content: str,
        tone: float = 5,
        emoji_density: EmojiLevel = "moderate",
        grant: Optional[GrantAuth] = None,
    ) -> AIResponse:
        try:
            completion = await self._complete(
                "polish", build_polish_prompt(content, tone, emoji_density), temperature=0.3, grant=grant
            )
        except LLMRequestError as exc:
            logger.error("AI Error (polish), returning original content: %s", exc)
            return AIResponse(result=content)
        return AIResponse(result=completion.content or content, signature=completion.signature)

    async def generate_tiered_content(self, tier: int, content_id: str) -> Dict[str, Any]:
        """Run the fixed stage sequence a paid tier unlocks."""
        if tier not in TIER_BODY_LENGTH:
            raise ValueError(f"Unsupported tier: {tier}")
        logger.info("Generating content for Tier %s (ID: %s)", tier, content_id)

        topics = await self.generate_topics(TIERED_INPUT)
        topic = topics.result[0]
        hooks = await self.generate_hooks(topic, TIERED_INTENT)
        bodies = await self.generate_body(hooks.result[0], topic, TIERED_INTENT, TIER_BODY_LENGTH[tier])

        if tier == 1:
            return {
                "tier": 1,
                "topic": topic,
                "hook": hooks.result[0],
                "body": bodies.result[0],
                "status": "completed",
            }
        if tier == 2:
            return {
                "tier": 2,
                "topic": topic,
                "hooks": hooks.result,
                "bodyOptions": bodies.result,
                "status": "completed",
            }

        ctas = await self.generate_cta(bodies.result[0], TIERED_INTENT)
        polished = await self.polish_content(bodies.result[0], TIER3_POLISH_TONE, TIER3_POLISH_EMOJI)
        return {
            "tier": 3,
            "topic": topic,
            "hooks": hooks.result,
            "bodies": bodies.result,
            "ctas": ctas.result,
            "finalPolished": polished.result,
            "status": "completed",
        }
