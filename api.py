"""
FastAPI web application for the AI Visibility Scanner
"""
from fastapi import FastAPI, HTTPException, Depends, Query, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from typing import List, Dict, Any, Optional, Literal
import logging
from datetime import datetime
import uvicorn

from app import AIVisibilityApp
from access import AccessDeniedError, resolve_access
from models import ScanResult
from utils import InvalidTargetError
from config import config

logger = logging.getLogger(__name__)

# Pydantic models for API requests
class CheckPayload(BaseModel):
    id: str
    category: str
    title: str
    status: Literal["pass", "warning", "fail"]
    score: int = Field(ge=0, le=100)
    summary: str = ""
    details: str = ""
    fixSnippet: Optional[str] = None
    fixLabel: Optional[str] = None

class CategoryPayload(BaseModel):
    id: str
    name: str
    icon: str = ""
    score: int = Field(ge=0, le=100)
    checks: List[CheckPayload]

class ScanResultPayload(BaseModel):
    url: str
    timestamp: str
    overallScore: int = Field(ge=0, le=100)
    letterGrade: Literal["A", "B", "C", "D", "F"]
    categories: List[CategoryPayload]

class CompareRequest(BaseModel):
    url: str
    competitors: List[str]

    @field_validator('competitors')
    @classmethod
    def competitors_must_not_be_empty(cls, v):
        if not [c for c in v if c and c.strip()]:
            raise ValueError('Competitors list cannot be empty')
        return v

# Response models
class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    components: Dict[str, Any]
    metrics: Dict[str, Any]

# Initialize FastAPI app
app = FastAPI(
    title="AI Visibility Scanner API",
    description="Scores how visible a website is to AI crawlers and answer engines",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global scanner app instance
visibility_app = None

@app.on_event("startup")
async def startup_event():
    """Initialize the scanner app on startup"""
    global visibility_app
    try:
        visibility_app = AIVisibilityApp()
        logger.info("AI Visibility Scanner API started successfully")
    except Exception as e:
        logger.error(f"Failed to initialize scanner app: {e}")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    """Clean up on shutdown"""
    global visibility_app
    if visibility_app:
        visibility_app.shutdown()
        logger.info("AI Visibility Scanner API shut down successfully")

def get_visibility_app():
    """Dependency to get the scanner app instance"""
    if visibility_app is None:
        raise HTTPException(status_code=500, detail="Scanner app not initialized")
    return visibility_app

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

# API Endpoints

@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint"""
    return {
        "message": "AI Visibility Scanner API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }

@app.get("/health", response_model=HealthResponse)
async def health_check(scanner: AIVisibilityApp = Depends(get_visibility_app)):
    """Health check endpoint"""
    try:
        status = scanner.get_system_status()
        return HealthResponse(
            status=status["health"]["overall_status"],
            timestamp=datetime.now(),
            components=status["health"]["components"],
            metrics=status["metrics"]
        )
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/api/scan")
async def scan_url(
    url: Optional[str] = Query(None, description="Site to scan"),
    scanner: AIVisibilityApp = Depends(get_visibility_app)
):
    """Scan a site and return its scored result"""
    if not url:
        return error_response(400, "Missing url parameter")

    try:
        result = await scanner.scan(url)
    except InvalidTargetError as e:
        return error_response(400, f"Invalid url parameter: {e}")
    except Exception as e:
        logger.error(f"Scan failed for {url}: {e}")
        return error_response(500, f"Scan failed: {e}")

    return result.to_dict()

@app.post("/api/insights")
async def scan_insights(
    payload: ScanResultPayload,
    demo: bool = Query(False, description="Use demo access"),
    x_access_key: Optional[str] = Header(None),
    scanner: AIVisibilityApp = Depends(get_visibility_app)
):
    """Per-model scores and priority recommendations for a scan result"""
    grant = resolve_access(x_access_key, demo, scanner.config)
    result = ScanResult.from_dict(payload.model_dump(exclude_none=True))
    try:
        return scanner.insights(result, grant)
    except AccessDeniedError as e:
        return error_response(402, str(e))

@app.post("/api/compare")
async def compare_sites(
    request: CompareRequest,
    demo: bool = Query(False, description="Use demo access"),
    x_access_key: Optional[str] = Header(None),
    scanner: AIVisibilityApp = Depends(get_visibility_app)
):
    """Compare a site against up to three competitors"""
    grant = resolve_access(x_access_key, demo, scanner.config)
    try:
        return await scanner.compare(request.url, request.competitors, grant)
    except AccessDeniedError as e:
        return error_response(402, str(e))
    except InvalidTargetError as e:
        return error_response(400, f"Invalid url parameter: {e}")
    except Exception as e:
        logger.error(f"Comparison failed for {request.url}: {e}")
        return error_response(500, f"Scan failed: {e}")

# Custom exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "timestamp": datetime.now().isoformat()
        }
    )

if __name__ == "__main__":
    uvicorn.run("api:app", host="0.0.0.0", port=8000, log_level=config.log_level.lower())
