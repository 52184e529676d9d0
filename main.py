"""
DietQuality API Server Entry Point
Registers the DQQ engine endpoints on the base API.

Deployment:
  uvicorn main:app --host 0.0.0.0 --port $PORT
"""

import os

from api_server import app, logger
from dqq_engine.api import register_dqq_endpoints

register_dqq_endpoints(app)
logger.info("DQQ engine endpoints registered")


# For local development
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
