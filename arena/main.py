# arena/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arena.api.routes import router
from arena.config import get_settings
from arena.errors import ArenaError, ConcurrencyConflictError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Arena Tic-Tac-Toe API",
    description="Tic-tac-toe games and sessions with AI-suggested moves and a heuristic fallback.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ArenaError)
async def arena_error_handler(request: Request, exc: ArenaError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"Retry-After": "1"} if isinstance(exc, ConcurrencyConflictError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
        headers=headers,
    )


app.include_router(router)


@app.get("/")
async def root():
    return {"message": "Arena Tic-Tac-Toe API"}


if __name__ == "__main__":
    import os

    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
