from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    catalog = request.app.state.catalog
    coordinator = catalog.coordinator
    snapshot = coordinator.snapshot
    return {
        "status": "healthy" if catalog.store.is_available else "degraded",
        "cache": coordinator.state.value,
        "products": len(snapshot) if snapshot is not None else None,
        "store": {
            "backend": type(catalog.store).__name__,
            "available": catalog.store.is_available
        }
    }


@router.get("/ready")
async def readiness_check(request: Request):
    coordinator = request.app.state.catalog.coordinator
    body = {"ready": coordinator.is_ready, "cache": coordinator.state.value}
    if coordinator.failure is not None:
        body["error"] = str(coordinator.failure)
    return JSONResponse(status_code=200 if coordinator.is_ready else 503, content=body)
