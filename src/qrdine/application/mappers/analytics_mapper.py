from __future__ import annotations

from qrdine.application.dto.responses import (
    AnalyticsSummaryResponse,
    DailyRevenueResponse,
    ItemPerformanceResponse,
    LocalizedTextResponse,
)
from qrdine.application.use_cases.analytics_summary import AnalyticsSummary, ItemPerformance
from qrdine.domain.order.totals import format_money


def to_item_performance_response(entry: ItemPerformance) -> ItemPerformanceResponse:
    return ItemPerformanceResponse(
        name=LocalizedTextResponse(en=entry.name.en, ar=entry.name.ar),
        quantity=entry.quantity,
        revenue=format_money(entry.revenue),
    )


def to_analytics_summary_response(summary: AnalyticsSummary) -> AnalyticsSummaryResponse:
    return AnalyticsSummaryResponse(
        start=summary.start,
        end=summary.end,
        orderCount=summary.order_count,
        dailyRevenue=[
            DailyRevenueResponse(day=entry.day, revenue=format_money(entry.revenue))
            for entry in summary.daily_revenue
        ],
        mostOrdered=[to_item_performance_response(entry) for entry in summary.most_ordered],
        topRevenue=[to_item_performance_response(entry) for entry in summary.top_revenue],
    )
