"""
Storefront API - Main FastAPI Application

Single entry point for the cart endpoints used by the storefront front end.
"""
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.logging import get_logger
from storefront.routers import cart_router

logger = get_logger(__name__)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("STOREFRONT_ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]


# ==================== FASTAPI APP ====================

app = FastAPI(
    title="Storefront Cart API",
    description="Session cart, totals and checkout for the storefront",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "storefront-cart"}
