from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Response

from qrdine.api.container import ServiceContainer, get_container
from qrdine.application.dto.responses import AnalyticsSummaryResponse
from qrdine.application.mappers.analytics_mapper import to_analytics_summary_response
from qrdine.application.use_cases.analytics_export import (
    ExportOrdersCsv,
    default_range,
    export_filename,
)
from qrdine.application.use_cases.analytics_summary import OrderAnalytics

router = APIRouter()


@router.get("/v1/analytics/summary", response_model=AnalyticsSummaryResponse)
async def analytics_summary(
    start: date | None = None,
    end: date | None = None,
    container: ServiceContainer = Depends(get_container),
) -> AnalyticsSummaryResponse:
    summary = await OrderAnalytics(container.gateway, container.settings.tax_rate).execute(start, end)
    return to_analytics_summary_response(summary)


@router.get("/v1/analytics/orders.csv")
async def export_orders_csv(
    start: date | None = None,
    end: date | None = None,
    container: ServiceContainer = Depends(get_container),
) -> Response:
    default_start, default_end = default_range(datetime.now(timezone.utc).date())
    start = start or default_start
    end = end or default_end
    body = await ExportOrdersCsv(container.gateway, container.settings.tax_rate).execute(start, end)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(start, end)}"'},
    )
