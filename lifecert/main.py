import logging
import traceback
from contextlib import asynccontextmanager
from pathlib import Path

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from lifecert.api.v1 import routers
from lifecert.core.config import settings
from lifecert.core.logging import configure_logging
from lifecert.db.session import connect_db_pool, close_db_pool

configure_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_db_pool()
    yield
    await close_db_pool()

app = FastAPI(
    title="Life Certificate API",
    description="Monthly proof-of-life submissions for pensioners and their review by administrators",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(routers.router)

Path(settings.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT), name="media")


@app.exception_handler(asyncpg.PostgresError)
async def database_error_handler(request: Request, exc: asyncpg.PostgresError):
    logging.error(f"Database error on {request.url.path}: {exc}\n{traceback.format_exc()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logging.error(f"Internal Server Error on {request.url.path}: {exc}\n{traceback.format_exc()}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content={"detail": "An unknown error occurred."})


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.SYSTEM_NAME} API"}
