import logging

from moviecollection.core.config import get_settings
from moviecollection.main import app

# Setup basic logging so request errors reach the platform logs
logging.basicConfig(level=get_settings().log_level.upper())
logger = logging.getLogger(__name__)

logger.info("Movie Collection api/index.py initialized")

# Entry point for serverless deployments; exports the FastAPI app instance
__all__ = ["app"]
