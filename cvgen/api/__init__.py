"""
HTTP surface for the generation pipeline (FastAPI).

Create the application with create_app(); `cvgen server` serves it with uvicorn.
"""

from cvgen.api.app import create_app

__all__ = ["create_app"]
