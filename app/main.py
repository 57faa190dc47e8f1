"""FastAPI application entry point"""

from contextlib import asynccontextmanager
from typing import Dict, Any, Optional
import asyncio
import logging

from fastapi import FastAPI, BackgroundTasks
from fastapi.middleware.cors import CORSMiddleware

from app.config.database import init_db
from app.config.settings import settings
from app.graphql import create_graphql_router
from app.jobs.trending_sync import normalize_windows, configured_windows, run_trending_sync
from app.orchestrator import TrendingOrchestrator

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Trending GitHub repositories enriched with GitHub, README, Hacker News and LinkedIn data",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global orchestrator instance
orchestrator = TrendingOrchestrator()

app.include_router(create_graphql_router(orchestrator), prefix="/graphql")

# Store last run stats (in-memory, for simple deployment)
last_stats: Dict[str, Any] = {}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "stats": "/api/stats",
            "sync_trending": "POST /api/sync/trending?windows=daily,weekly,monthly",
            "graphql": "/graphql",
        }
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint for serverless platforms"""
    return {
        "status": "healthy",
        "service": "trending-radar",
        "version": settings.APP_VERSION
    }


@app.get("/api/stats")
async def get_stats():
    """Get last trending sync statistics"""
    return last_stats.get("trending", {
        "started_at": None,
        "inserted": 0,
        "updated": 0,
        "deleted": 0,
        "refreshed": 0,
        "errors": [],
    })


@app.post("/api/sync/trending")
async def sync_trending(background_tasks: BackgroundTasks, windows: Optional[str] = None):
    """Trigger the trending sync"""
    selected = normalize_windows(windows, default=configured_windows())
    logger.info(f"Trending sync triggered for windows: {', '.join(selected)}")

    async def run_sync():
        try:
            stats = await run_trending_sync(orchestrator=orchestrator, windows=selected)
            last_stats["trending"] = stats
            logger.info(f"Trending sync completed: {stats.get('inserted', 0)} projects inserted")
        except Exception as e:
            logger.error(f"Trending sync failed: {e}", exc_info=True)

    background_tasks.add_task(run_sync)
    return {
        "status": "started",
        "windows": selected,
        "message": "Trending sync started in background"
    }


# AWS Lambda handler
def lambda_handler(event: Dict[str, Any], context: Any):
    """
    AWS Lambda handler for scheduled events and API Gateway requests

    Expected scheduled event format:
    {
        "source": "trending",
        "windows": "daily,weekly,monthly"  (optional)
    }
    """
    event = event or {}
    logger.info(f"Lambda invoked with event keys: {sorted(event.keys())}")

    if "source" in event:
        source = event["source"]
        logger.info(f"Scheduled run for source: {source}")

        if source != "trending":
            return {
                "statusCode": 400,
                "body": f"Unknown source: {source}"
            }

        try:
            stats = asyncio.run(run_trending_sync(orchestrator=orchestrator, windows=event.get("windows")))
            logger.info(f"Trending sync completed: {stats}")
            return {
                "statusCode": 200,
                "body": f"Trending sync finished: {stats.get('inserted', 0)} inserted, {stats.get('deleted', 0)} deleted"
            }
        except Exception as e:
            logger.error(f"Lambda trending sync failed: {e}", exc_info=True)
            return {
                "statusCode": 500,
                "body": f"Trending sync failed: {str(e)}"
            }

    # Otherwise, handle as HTTP request
    from mangum import Mangum
    handler = Mangum(app)
    return handler(event, context)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
