"""Run the API with ``python -m turbcast.api``."""

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "turbcast.api.app:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
    )
