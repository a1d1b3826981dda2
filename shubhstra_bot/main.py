"""
Main application entry point for the Shubhstra clinic bot.
"""

import uvicorn
from dotenv import load_dotenv

from .api.app import create_app
from .config import get_settings
from .utils.logging import configure_logging

load_dotenv()
configure_logging(get_settings().log_level)

# Create the FastAPI application
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "shubhstra_bot.main:app",
        host="0.0.0.0",
        port=8001,
        reload=True
    )
