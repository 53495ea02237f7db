"""Content generation routes: pipeline stages and polish."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from basedlink.deps import get_generation_service
from basedlink.generation import GenerationService
from basedlink.llm_service import GrantAuth
from basedlink.schemas import GenerateRequest, PolishRequest

logger = logging.getLogger("basedlink.routes.generate")

router = APIRouter(prefix="/api", tags=["generate"])

GENERATE_STEPS = ("topics", "hooks", "body", "cta")


@router.post("/generate")
async def generate(payload: GenerateRequest, service: GenerationService = Depends(get_generation_service)):
    logger.info("Generate request - step: %s, model: %s", payload.step, payload.model)
    if payload.step not in GENERATE_STEPS:
        return JSONResponse(status_code=400, content={"error": "Invalid step"})
    if not (payload.input or "").strip():
        return JSONResponse(status_code=400, content={"error": "Missing input"})

    grant = None
    if payload.grant_message:
        grant = GrantAuth(
            wallet_address=payload.wallet_address,
            grant_message=payload.grant_message,
            grant_signature=payload.grant_signature,
        )
        logger.info("Grant auth received for wallet: %s", payload.wallet_address)

    text = payload.input or ""
    intent = payload.intent or "viral"
    try:
        if payload.step == "topics":
            response = await service.generate_topics(text, model=payload.model, grant=grant)
        elif payload.step == "hooks":
            response = await service.generate_hooks(text, intent, model=payload.model, grant=grant)
        elif payload.step == "body":
            response = await service.generate_body(
                text,
                payload.context or "",
                intent,
                payload.length or "medium",
                model=payload.model,
                grant=grant,
                tone=5 if payload.tone is None else payload.tone,
                emoji_density="moderate" if payload.emoji_density is None else payload.emoji_density,
                language=payload.language or "id",
            )
        else:
            response = await service.generate_cta(text, intent, model=payload.model, grant=grant)
    except Exception:
        logger.exception("Generation error")
        return JSONResponse(status_code=500, content={"error": "Failed to generate content"})

    return response.model_dump(exclude_none=True)


@router.post("/polish")
async def polish(payload: PolishRequest, service: GenerationService = Depends(get_generation_service)):
    logger.info("Polish request")
    if not (payload.content or "").strip():
        return JSONResponse(status_code=400, content={"error": "Missing content"})

    try:
        response = await service.polish_content(
            payload.content,
            5 if payload.tone is None else payload.tone,
            "moderate" if payload.emoji_density is None else payload.emoji_density,
        )
    except Exception:
        logger.exception("Polish error")
        return JSONResponse(status_code=500, content={"error": "Failed to polish content"})

    return response.model_dump(exclude_none=True)
