"""Grant message proxy route."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from basedlink.deps import get_grant_client
from basedlink.grant_service import GrantClient, GrantServiceError

logger = logging.getLogger("basedlink.routes.grant")

router = APIRouter(prefix="/api/grant", tags=["grant"])


@router.get("/message")
async def grant_message(address: Optional[str] = None, client: GrantClient = Depends(get_grant_client)):
    if not address:
        return JSONResponse(status_code=400, content={"error": "Missing wallet address"})

    try:
        message = await client.fetch_grant_message(address)
    except GrantServiceError as exc:
        logger.error("Grant route error: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
    return {"message": message}
