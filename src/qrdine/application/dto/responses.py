from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class LocalizedTextResponse(BaseModel):
    en: str
    ar: str


class CategoryResponse(BaseModel):
    categoryId: str
    name: LocalizedTextResponse
    displayOrder: int


class PriceVariantResponse(BaseModel):
    priceId: str
    size: LocalizedTextResponse
    price: str


class MenuItemResponse(BaseModel):
    itemId: str
    name: LocalizedTextResponse
    description: LocalizedTextResponse | None = None
    categoryId: str | None = None
    isAvailable: bool
    prepTimeMinutes: int
    imageUrl: str | None = None
    variants: list[PriceVariantResponse] = Field(default_factory=list)


class QuickActionResponse(BaseModel):
    actionId: str
    label: LocalizedTextResponse
    displayOrder: int


class MenuResponse(BaseModel):
    categories: list[CategoryResponse] = Field(default_factory=list)
    items: list[MenuItemResponse] = Field(default_factory=list)
    quickActions: list[QuickActionResponse] = Field(default_factory=list)


class OrderItemResponse(BaseModel):
    orderItemId: str
    itemId: str | None = None
    priceId: str | None = None
    name: LocalizedTextResponse
    size: LocalizedTextResponse | None = None
    quantity: int
    unitPrice: str | None = None
    lineTotal: str
    notes: str | None = None


class OrderResponse(BaseModel):
    orderId: str
    shortId: str
    tableNumber: str
    status: str
    dinerCount: int | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)
    subtotal: str
    tax: str
    total: str
    placedAt: datetime


class SubmittedOrderResponse(BaseModel):
    orderId: str
    confirmationCode: str
    tableNumber: str
    subtotal: str
    tax: str
    total: str


class QuickActionRequestResponse(BaseModel):
    requestId: str
    tableNumber: str
    actionId: str | None = None
    label: LocalizedTextResponse | None = None
    status: str
    requestedAt: datetime


class QuickActionRequestCreatedResponse(BaseModel):
    requestId: str
    tableNumber: str
    actionId: str


class OrderStatisticsResponse(BaseModel):
    totalOrders: int
    completedOrders: int
    pendingOrders: int
    revenue: str


class PendingCountsResponse(BaseModel):
    orders: int
    quickActions: int


class MonitorSnapshotResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)
    quickActionRequests: list[QuickActionRequestResponse] = Field(default_factory=list)
    tables: dict[str, str] = Field(default_factory=dict)
    statistics: OrderStatisticsResponse
    pending: PendingCountsResponse
    soundEnabled: bool
    alertLoopActive: bool
    loadedAt: datetime | None = None


class OrderStatusResponse(BaseModel):
    orderId: str
    status: str


class DeletedOrdersResponse(BaseModel):
    deleted: int


class DailyRevenueResponse(BaseModel):
    day: date
    revenue: str


class ItemPerformanceResponse(BaseModel):
    name: LocalizedTextResponse
    quantity: int
    revenue: str


class AnalyticsSummaryResponse(BaseModel):
    start: date
    end: date
    orderCount: int
    dailyRevenue: list[DailyRevenueResponse] = Field(default_factory=list)
    mostOrdered: list[ItemPerformanceResponse] = Field(default_factory=list)
    topRevenue: list[ItemPerformanceResponse] = Field(default_factory=list)
