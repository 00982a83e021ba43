"""
Risk Policy Decision Tree - Backend Server
"""
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings
from routes.risk_policies import router as risk_policies_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(title="Risk Policy Decision Tree API", version="1.0.0")
api_router = APIRouter(prefix="/api")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== ENDPOINTS ====================

@api_router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "reward_ratio": settings.REWARD_RATIO,
        "win_probability": settings.WIN_PROBABILITY,
        "max_compounding_depth": settings.MAX_COMPOUNDING_DEPTH,
    }

api_router.include_router(risk_policies_router)
app.include_router(api_router)

logger.info("Risk Policy Decision Tree API ready")
