"""Run the API under Uvicorn on the configured port."""

import uvicorn

from .main import app, config


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level=config.log_level.lower())
