from dotenv import load_dotenv
load_dotenv()

import asyncio
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ENV
from config.env import ENV, LOG_LEVEL, CORS_ALLOWED_ORIGINS, SHIPMENT_CACHE_TTL_SECONDS, validate_production_env

# ROUTES
from routes.orders import router as orders_router
from routes.seller import router as seller_router

# UPSTREAM
from upstream import create_http_client
from utils.shipment_cache import ShipmentRecordCache
from utils.submission_guard import SubmissionGuard

# WORKERS
from workers.shipment_cache_worker import shipment_cache_worker

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

validate_production_env()
logger.info("ENV: %s", ENV)

app = FastAPI(
    title="Storefront Orders API",
    version="1.0.0",
    docs_url=None if ENV == "production" else "/docs",
    redoc_url=None if ENV == "production" else "/redoc",
    openapi_url=None if ENV == "production" else "/openapi.json",
)

# -----------------------------
# CORS
# -----------------------------

allowed_origins = [origin.strip() for origin in CORS_ALLOWED_ORIGINS if origin.strip()]
if not allowed_origins:
    allowed_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# ROUTES
# -----------------------------

app.include_router(orders_router, prefix="/api")
app.include_router(seller_router, prefix="/api")

# -----------------------------
# HEALTH CHECKS
# -----------------------------

@app.get("/api/health")
async def health():

    return {"status": "ok"}

# -----------------------------
# STARTUP / SHUTDOWN (ONE PLACE ONLY)
# -----------------------------

@app.on_event("startup")
async def start_upstream_and_workers():
    app.state.http_client = create_http_client()
    app.state.shipment_cache = ShipmentRecordCache(SHIPMENT_CACHE_TTL_SECONDS)
    app.state.submission_guard = SubmissionGuard()

    app.state.workers = [
        asyncio.create_task(shipment_cache_worker(app.state.shipment_cache)),
    ]


@app.on_event("shutdown")
async def stop_upstream_and_workers():
    for task in app.state.workers:
        task.cancel()

    await app.state.http_client.aclose()
