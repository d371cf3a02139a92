"""
Business Discovery Agent - Main Application

A FastAPI service that discovers a business from its Google Maps listing
(remote browser, hosted crawler or mock data), analyzes its reviews with
Claude AI (Anthropic) and turns them into prioritized, measurable tasks.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
load_dotenv()

from api.routes import router
from config import settings
from core.cache import close_profile_store
from core.tracing import get_tracer
from utils.clients.apify import close_apify_client
from utils.clients.browserbase import close_browserbase_client

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_tracer().ensure_initialized()
    logger.info("🚀 Business Discovery Agent started")
    yield
    await close_browserbase_client()
    await close_apify_client()
    await close_profile_store()
    logger.info("👋 Business Discovery Agent stopped")


# Initialize FastAPI app
app = FastAPI(title="Business Discovery Agent", lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routes from api/routes.py
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, timeout_keep_alive=60)
