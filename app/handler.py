"""
AWS Lambda entrypoint for the trending sync

Pure event-driven Lambda handler triggered by EventBridge Scheduler.
No FastAPI or HTTP server logic - just direct function invocation.
"""

import asyncio
import logging
from typing import Dict, Any, Optional

from app.jobs.trending_sync import run_trending_sync
from app.orchestrator import TrendingOrchestrator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Instantiate orchestrator once per Lambda execution environment
orchestrator = TrendingOrchestrator()


def lambda_handler(event: Optional[Dict[str, Any]], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda entrypoint for the trending sync.

    Expected event payloads (from EventBridge Scheduler or other callers):
    - {"source": "trending"}
    - {"source": "trending", "windows": "daily,weekly"}

    Default is "trending" if no source is provided.

    Args:
        event: Event payload from EventBridge or other AWS service
        context: Lambda context object

    Returns:
        Dictionary with statusCode, source, and result
    """
    payload = event or {}
    source = payload.get("source", "trending")
    logger.info(f"Lambda invoked with source: {source}")

    try:
        if source == "trending":
            result = asyncio.run(run_trending_sync(orchestrator=orchestrator, windows=payload.get("windows")))

        else:
            error_msg = f"Unknown source: {source}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.info(f"Trending sync completed: {result}")

        return {
            "statusCode": 200,
            "source": source,
            "result": result,
        }

    except Exception as e:
        logger.error(f"Lambda execution failed: {e}", exc_info=True)
        return {
            "statusCode": 500,
            "source": source,
            "error": str(e),
        }


# Allow local testing via `python -m app.handler`
if __name__ == "__main__":
    print("=" * 60)
    print("Trending Radar - Local Test")
    print("=" * 60)

    test_event = {"source": "trending", "windows": "daily"}
    print(f"\nTesting with event: {test_event}")
    print("-" * 60)

    result = lambda_handler(test_event, None)

    print("\nResult:")
    print(result)
    print("=" * 60)
