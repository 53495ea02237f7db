import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from basedlink.config import get_settings
from basedlink.logging_utils import setup_logging
from basedlink.payment_gateway import PaymentError
from basedlink.routes import generate_router, grant_router, payment_router


settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger("basedlink.main")

if not settings.payment_configured:
    logger.warning("FACILITATOR_PRIVATE_KEY or PAYMENT_CONTRACT_ADDRESS missing; payment routes will fail")


app = FastAPI(
    title="BasedLink API",
    description="LinkedIn post generation with on-chain USDC payments",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generate_router)
app.include_router(payment_router)
app.include_router(grant_router)


@app.middleware("http")
async def utf8_charset_middleware(request: Request, call_next):
    response = await call_next(request)
    ct = response.headers.get("content-type", "")
    if "application/json" in ct and "charset" not in ct:
        response.headers["content-type"] = ct + "; charset=utf-8"
    return response


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    logger.error("Payment error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "Invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(part for part in first.get("loc", ()) if isinstance(part, str) and part != "body")
        detail = f"Invalid {field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content={"success": False, "error": detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
async def root():
    return {"message": "BasedLink Backend is running"}


@app.get("/health")
async def health_check():
    return {"status": "ok", "message": "BasedLink Backend is running"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
