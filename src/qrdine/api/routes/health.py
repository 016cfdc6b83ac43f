from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from qrdine.api.container import ServiceContainer, get_container

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(
    response: Response,
    container: ServiceContainer = Depends(get_container),
) -> dict[str, object]:
    checks = {name: check() for name, check in container.ready_checks.items()}

    if all(checks.values()):
        return {"status": "ok", "checks": checks}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unavailable", "checks": checks}
