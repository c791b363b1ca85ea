"""
AI Knowledge Worker proxy - FastAPI Application
Holds the upstream API keys and forwards news, stock and AI analysis calls
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from backend.config import settings
from backend.errors import ProxyError, UpstreamError
from backend.gemini_helper import GeminiClient, get_gemini_client
from backend.models import AnalyzeRequest, AnalyzeResponse, ErrorResponse, is_missing
from backend.news_client import NewsClient, get_news_client
from backend.stock_client import AlphaVantageClient, get_alphavantage_client

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0"
CORS_REJECTION = "The CORS policy for this site does not allow access from the specified Origin."
ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}

app = FastAPI(
    title="AI Knowledge Worker - Proxy API",
    description="Keeps API keys server-side for news, stock and AI analysis calls",
    version=VERSION,
)

# =============================
# MIDDLEWARE
# =============================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def enforce_origin_allow_list(request: Request, call_next):
    """Reject browser requests from unknown origins; non-browser clients send no Origin"""
    origin = request.headers.get("origin")
    if origin and origin not in settings.allowed_origins:
        logger.warning(f"Blocked request from origin {origin}")
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": CORS_REJECTION})
    return await call_next(request)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    """Add security headers to all responses"""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if settings.REQUIRE_HTTPS:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response


# =============================
# PUBLIC ENDPOINTS
# =============================

@app.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint - server liveness check"""
    return "Backend server is live!"


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "AI Knowledge Worker proxy",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# =============================
# PROXY ENDPOINTS
# =============================

@app.get("/api/news", responses=ERROR_RESPONSES)
async def news(
    topic: Optional[str] = None,
    client: NewsClient = Depends(get_news_client),
):
    """
    Search news articles for a topic via NewsAPI
    Query: topic
    """
    if is_missing(topic):
        raise ProxyError(status.HTTP_400_BAD_REQUEST, "Topic is required")

    try:
        return await client.search(topic)
    except UpstreamError as e:
        logger.error(f"News API error: {e}")
        raise ProxyError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch news")


@app.get("/api/stock", responses=ERROR_RESPONSES)
async def stock(
    symbol: Optional[str] = None,
    client: AlphaVantageClient = Depends(get_alphavantage_client),
):
    """
    Company overview for a ticker via Alpha Vantage
    Query: symbol
    """
    if is_missing(symbol):
        raise ProxyError(status.HTTP_400_BAD_REQUEST, "Stock symbol is required")

    try:
        return await client.get_overview(symbol)
    except UpstreamError as e:
        logger.error(f"Stock API error: {e}")
        raise ProxyError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch stock data")


@app.post("/api/analyze", response_model=AnalyzeResponse, responses=ERROR_RESPONSES)
async def analyze(
    payload: Optional[AnalyzeRequest] = None,
    client: GeminiClient = Depends(get_gemini_client),
):
    """
    Ask Gemini for a summary and key insights about a JSON payload
    Body: {"data": <any JSON>}
    """
    if payload is None or is_missing(payload.data):
        raise ProxyError(status.HTTP_400_BAD_REQUEST, "Data is required")

    try:
        text = await client.analyze(payload.data)
    except UpstreamError as e:
        logger.error(f"Gemini API error: {e}")
        raise ProxyError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to analyze data")
    return AnalyzeResponse(analysis=text)


# =============================
# ERROR HANDLERS
# =============================

@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the same error shape as missing parameters"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request"})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors gracefully"""
    logger.exception(f"Unexpected error: {type(exc).__name__}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
