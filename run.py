#!/usr/bin/env python3
"""
Startup script for the AI Trip Planner Map API
"""

import uvicorn
import logging
from tripmap.utils.config import get_settings, validate_settings

def main():
    """Main startup function"""

    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format=settings.LOG_FORMAT
    )
    logger = logging.getLogger(__name__)

    try:
        if not validate_settings():
            logger.error("Invalid configuration. Please check your environment variables.")
            logger.error("Required: OPENAI_API_KEY, AMAP_WEB_KEY")
            return 1

        logger.info("Starting AI Trip Planner Map API...")
        logger.info(f"API Version: {settings.API_VERSION}")
        logger.info(f"Model: {settings.OPENAI_MODEL}")
        logger.info(f"Debug Mode: {settings.DEBUG_MODE}")
        logger.info(f"Host: {settings.API_HOST}:{settings.API_PORT}")

        # Start the server
        uvicorn.run(
            "tripmap.api.main:app",
            host=settings.API_HOST,
            port=settings.API_PORT,
            reload=settings.DEBUG_MODE,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=True
        )

    except KeyboardInterrupt:
        logger.info("Shutting down gracefully...")
        return 0
    except Exception as e:
        logger.error(f"Failed to start server: {str(e)}")
        return 1

if __name__ == "__main__":
    exit(main())
