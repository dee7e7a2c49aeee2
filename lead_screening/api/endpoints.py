"""
FastAPI Endpoints for the Lead Screening Engine
===============================================
HTTP gate around the exclusion and cohort stages.

Base URL: http://localhost:8000

Endpoints:
- GET  /                          - API info
- GET  /api/health                - Health check (with rule table versions)
- POST /api/exclusion/check       - Exclusion verdict for a practice
- POST /api/submissions/validate  - Submission gate (400 when excluded)
- POST /api/cohort/classify       - Cohort for an enriched lead
- GET  /api/cohort/colors         - Badge color per cohort
"""

import logging
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

from ..config.settings import API_CONFIG
from ..engine import LeadScreeningEngine, create_engine
from ..models.schemas import ClassificationInput, ExclusionVerdict

logger = logging.getLogger(__name__)


# =============================================================================
# FastAPI App Initialization
# =============================================================================

app = FastAPI(
    title=API_CONFIG["title"],
    description="""
## Lead Exclusion & Cohort Classification

### Features:
- **Exclusion gate**: blocks DSO, educational, government and clinic practices before enrichment
- **Cohort tagging**: assigns a market cohort to enriched leads
- **Versioned rule tables**: loaded once at startup, validated up front
    """,
    version=API_CONFIG["version"],
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - Allow all origins for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Engine Initialization
# =============================================================================

# A missing or invalid rule table raises here and aborts startup
default_engine: LeadScreeningEngine = create_engine()


def get_engine() -> LeadScreeningEngine:
    return default_engine


# =============================================================================
# Request/Response Models
# =============================================================================

class ExclusionCheckRequest(BaseModel):
    """Practice to check before submission"""
    practice_name: Optional[str] = Field("", description="Practice name")
    query: Optional[str] = Field("", description="URL, domain, or free-text search query")

    class Config:
        json_schema_extra = {
            "example": {
                "practice_name": "Aspen Dental Meridian",
                "query": "Aspen Dental Meridian, 3270 N Eagle Rd, Meridian, ID",
            }
        }


class CohortResponse(BaseModel):
    """Cohort verdict for the results page badge"""
    cohort: str
    color: str
    reason: str
    condition: str
    matched_pattern: Optional[str] = None
    sufficient_data: bool


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@app.get("/", tags=["Info"])
async def root():
    """API information and available endpoints"""
    return {
        "service": API_CONFIG["title"],
        "version": API_CONFIG["version"],
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "Exclusion Check": "POST /api/exclusion/check",
            "Submission Gate": "POST /api/submissions/validate",
            "Cohort": "POST /api/cohort/classify",
            "Cohort Colors": "GET /api/cohort/colors",
            "Health": "GET /api/health",
        }
    }


@app.get("/api/health", tags=["Info"])
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": API_CONFIG["title"],
        "version": API_CONFIG["version"],
        "timestamp": datetime.utcnow().isoformat(),
        "rules": get_engine().get_info(),
    }


# =============================================================================
# Exclusion Endpoints
# =============================================================================

@app.post("/api/exclusion/check", response_model=ExclusionVerdict, tags=["Exclusion"])
async def check_exclusion(request: ExclusionCheckRequest):
    """Run the full exclusion check and return the verdict"""
    return get_engine().check_exclusion(request.practice_name, request.query)


@app.post("/api/submissions/validate", tags=["Exclusion"])
async def validate_submission(request: ExclusionCheckRequest):
    """
    Backend submission gate.

    Re-runs the exclusion check server-side so client-side checks cannot be
    bypassed. Excluded practices get a 400 with the verdict details.
    """
    verdict = get_engine().check_exclusion(request.practice_name, request.query)

    if verdict.is_excluded:
        logger.info("Submission blocked: %s", verdict.reason)
        return JSONResponse(
            status_code=400,
            content={
                "error": f"This practice type is excluded: {verdict.reason}",
                "exclusion": verdict.model_dump(mode="json"),
            },
        )

    return {"allowed": True, "verdict": verdict.model_dump(mode="json")}


# =============================================================================
# Cohort Endpoints
# =============================================================================

@app.post("/api/cohort/classify", response_model=CohortResponse, tags=["Cohort"])
async def classify_cohort(lead: ClassificationInput):
    """Classify an enriched lead into a cohort"""
    engine = get_engine()
    match = engine.evaluate_cohort(lead)
    return CohortResponse(
        cohort=match.cohort,
        color=engine.cohort_color(match.cohort),
        reason=match.reason,
        condition=match.condition.value,
        matched_pattern=match.matched_pattern,
        sufficient_data=match.sufficient_data,
    )


@app.get("/api/cohort/colors", tags=["Cohort"])
async def cohort_colors():
    """Badge color for every configured cohort"""
    return get_engine().store.cohorts.colors()


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "type": type(exc).__name__,
        }
    )
