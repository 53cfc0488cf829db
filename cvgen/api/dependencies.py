from fastapi import Request

from cvgen.config import Settings
from cvgen.contexts.generation.pipeline import DocumentPipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> DocumentPipeline:
    return request.app.state.pipeline
