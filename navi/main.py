# navi/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from navi import __version__
from navi.api.routes import palette
from navi.config import settings
from navi.services.desktop_service import get_desktop_service
from navi.socket import init_socket, presenters, socket_app
from navi.utils.async_utils import cleanup_executor

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ========== STARTUP ==========
    logger.info("=" * 60)
    logger.info("🚀 Navi starting up...")
    logger.info("=" * 60)

    service = get_desktop_service()
    logger.info(f"🔧 Tools loaded: {', '.join(service.registry.list_tools())}")

    try:
        count = await service.warm_up()
        logger.info(f"✅ App catalog ready ({count} apps)")
    except Exception as e:
        logger.warning(f"⚠️ App catalog warm-up failed: {e}")

    init_socket()
    logger.info("📡 Palette socket available at /socket.io")

    logger.info("=" * 60)
    logger.info(f"✅ Navi ready on {settings.host}:{settings.port}")
    logger.info("=" * 60)

    yield

    # ========== SHUTDOWN ==========
    logger.info("Navi shutting down...")
    for presenter in list(presenters.values()):
        presenter.on_hide()
    presenters.clear()
    cleanup_executor()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Navi",
    description="Command palette backend: intent classification, suggestions and desktop actions",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(palette.router)

app.mount("/socket.io", socket_app)


@app.get("/")
def read_root():
    return {
        "message": "Navi is ready",
        "socket": "/socket.io",
        "docs": "/docs",
    }
