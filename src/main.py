"""Main FastAPI application entry point for the video Q&A service.

The application itself lives in src.api.main.
"""

from src.api.main import app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:app", host="127.0.0.1", port=3000, reload=True)
