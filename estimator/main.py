from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .routers import estimates, pricing

logger = logging.getLogger("estimator")

app = FastAPI(
    title=f"{settings.COMPANY_NAME} Material Estimator",
    description="Material takeoffs and priced estimates for decks, kitchens, and bathrooms",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(estimates.router, prefix="/api")
app.include_router(pricing.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "estimator"}
