"""
Entry point for the Simulator Records API
"""

import sys
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

# Import the FastAPI application
from app import app
from config.settings import PORT

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Simulator Records API on port {PORT}")
    logger.info(f"Health check: http://localhost:{PORT}/health")
    logger.info(f"API endpoints: http://localhost:{PORT}/api/data")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
