# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.routes import router as api_router
from app.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if not settings.brave_search_api_key:
    logger.warning("BRAVE_SEARCH_API_KEY is not set, competitor analysis uses demo data")
if not settings.openai_api_key:
    logger.warning("OPENAI_API_KEY is not set, generation uses demo data and /api/rewrite is unavailable")

app = FastAPI(title="Kiji")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """入力エラーは 422 ではなく 400 で返す。"""
    errors = exc.errors()
    message = errors[0].get("msg", "入力が不正です") if errors else "入力が不正です"
    return JSONResponse(
        status_code=400,
        content={"detail": message, "errors": jsonable_encoder(errors, exclude={"ctx", "input"})},
    )


app.include_router(api_router, prefix="/api")
