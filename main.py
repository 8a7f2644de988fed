from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from config import settings
from deps import shutdown_clients
from routers import auth_router, post_router, taxonomy_router, view_router
from utils.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    logger.info("[BOOT] blog-web store={}", settings.rest_base)
    yield
    await shutdown_clients()


app = FastAPI(lifespan=lifespan)

app.include_router(post_router.router, prefix="/posts", tags=["Post API"])
app.include_router(taxonomy_router.router, tags=["Taxonomy API"])
app.include_router(auth_router.router, prefix="/auth", tags=["Auth API"])
app.include_router(view_router.router, prefix="/view", tags=["View API"])

@app.get("/")
def health_check():
    return {"status": "ok"}
