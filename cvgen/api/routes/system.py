from fastapi import APIRouter

from cvgen import __version__

router = APIRouter(tags=["system"])


@router.get("/health", summary="Liveness check")
def health() -> dict:
    return {"status": "ok", "version": __version__}
