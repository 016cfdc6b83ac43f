from __future__ import annotations

import hashlib

from fastapi import APIRouter, Depends, Header, Response

from qrdine.api.container import ServiceContainer, get_container
from qrdine.application.dto.responses import MenuResponse
from qrdine.application.mappers.menu_mapper import to_menu_response
from qrdine.application.use_cases.get_menu import GetMenu

router = APIRouter()


def _get_menu_use_case(container: ServiceContainer) -> GetMenu:
    return GetMenu(gateway=container.gateway)


def _etag(payload: MenuResponse) -> str:
    digest = hashlib.sha256(payload.model_dump_json().encode("utf-8")).hexdigest()
    return f'"menu-{digest[:16]}"'


@router.get("/v1/menu", response_model=MenuResponse)
async def get_menu(
    response: Response,
    container: ServiceContainer = Depends(get_container),
    if_none_match: str | None = Header(default=None, alias="If-None-Match"),
) -> MenuResponse | Response:
    payload = to_menu_response(await _get_menu_use_case(container).execute())

    etag = _etag(payload)
    if if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})

    response.headers["ETag"] = etag
    return payload
