from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, TypeVar
from uuid import uuid4

from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, selectinload

from qrdine.application.ports.change_feed import (
    ORDER_ITEMS_TABLE,
    ORDERS_TABLE,
    QUICK_ACTION_REQUESTS_TABLE,
    ChangeEventType,
    ChangePublisher,
)
from qrdine.application.ports.gateway import (
    NewItemPrice,
    NewOrder,
    NewOrderItem,
    NewQuickActionRequest,
    RecordNotFoundError,
    RowShapeError,
)
from qrdine.domain.common.ids import (
    CategoryId,
    MenuItemId,
    OrderId,
    OrderItemId,
    PriceVariantId,
    QuickActionId,
    QuickActionRequestId,
    TableNumber,
)
from qrdine.domain.menu.entities import Category, LocalizedText, MenuItem, PriceVariant
from qrdine.domain.order.entities import Order, OrderItem, OrderStatus
from qrdine.domain.quick_action.entities import (
    QuickAction,
    QuickActionRequest,
    QuickActionRequestStatus,
)
from qrdine.infrastructure.db.models.menu import CategoryModel, ItemPriceModel, MenuItemModel
from qrdine.infrastructure.db.models.order import OrderItemModel, OrderModel
from qrdine.infrastructure.db.models.quick_action import (
    QuickActionModel,
    QuickActionRequestModel,
)
from qrdine.infrastructure.db.retry import Sleep, with_retry
from qrdine.infrastructure.db.session import build_engine
from qrdine.infrastructure.observability.otel import get_tracer

logger = logging.getLogger(__name__)

T = TypeVar("T")

CATEGORIES_TABLE = "categories"
MENU_ITEMS_TABLE = "menu_items"
ITEM_PRICES_TABLE = "item_prices"
QUICK_ACTIONS_TABLE = "quick_actions"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _text(en: str | None, ar: str | None) -> LocalizedText:
    return LocalizedText(en=en or "", ar=ar or "")


def _optional_text(en: str | None, ar: str | None) -> LocalizedText | None:
    if not en and not ar:
        return None
    return _text(en, ar)


class SqlAlchemyGateway:
    """Persistence gateway over SQLAlchemy.

    Calls run in a worker thread and are retried on database errors.
    Rows leave this class only as domain records; anything that does not
    fit one raises :class:`RowShapeError`. Successful writes are announced
    on the change publisher when one is configured.
    """

    def __init__(
        self,
        database_url: str | None = None,
        *,
        engine: Engine | None = None,
        publisher: ChangePublisher | None = None,
        retry_attempts: int = 3,
        retry_base_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if database_url is None and engine is None:
            raise ValueError("database_url or engine is required")
        self._database_url = database_url
        self._provided_engine = engine
        self._engine: Engine | None = None
        self._publisher = publisher
        self._retry_attempts = retry_attempts
        self._retry_base_delay = retry_base_delay
        self._sleep = sleep
        self._clock = clock

    def connect(self) -> None:
        if self._engine is not None:
            return
        if self._provided_engine is not None:
            self._engine = self._provided_engine
        else:
            assert self._database_url is not None
            self._engine = build_engine(self._database_url)
        logger.info("gateway_connected", extra={"dialect": self._engine.dialect.name})

    def dispose(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("gateway_disposed")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("gateway is not connected; call connect() first")
        return self._engine

    async def _run(self, operation: str, work: Callable[[Session], T]) -> T:
        engine = self.engine

        def call() -> T:
            with Session(engine) as session:
                return work(session)

        async def attempt() -> T:
            return await asyncio.to_thread(call)

        with get_tracer().start_as_current_span(f"gateway.{operation}"):
            return await with_retry(
                operation,
                attempt,
                attempts=self._retry_attempts,
                base_delay=self._retry_base_delay,
                sleep=self._sleep,
            )

    async def _publish(self, table: str, event_type: ChangeEventType, row: dict[str, Any]) -> None:
        if self._publisher is None:
            return
        try:
            await asyncio.to_thread(self._publisher.publish_change, table, event_type, row)
        except Exception:
            logger.exception(
                "change_publish_failed",
                extra={"table": table, "event_type": event_type.value},
            )

    async def _read(self, operation: str, work: Callable[[Session], T]) -> T:
        def shaped(session: Session) -> T:
            try:
                return work(session)
            except (ValueError, TypeError, KeyError) as exc:
                raise RowShapeError(operation, f"{operation}: malformed row: {exc}") from exc

        return await self._run(operation, shaped)

    # reads

    async def get_categories(self) -> list[Category]:
        def work(session: Session) -> list[Category]:
            statement = (
                select(CategoryModel)
                .where(CategoryModel.is_active.is_(True))
                .order_by(CategoryModel.display_order, CategoryModel.id)
            )
            return [
                Category(
                    category_id=CategoryId(model.id),
                    name=_text(model.name_en, model.name_ar),
                    display_order=model.display_order,
                )
                for model in session.scalars(statement)
            ]

        return await self._read("get_categories", work)

    async def get_menu_items(self) -> list[MenuItem]:
        def work(session: Session) -> list[MenuItem]:
            statement = (
                select(MenuItemModel)
                .options(selectinload(MenuItemModel.prices))
                .where(MenuItemModel.is_available.is_(True))
                .order_by(MenuItemModel.display_order, MenuItemModel.id)
            )
            return [self._to_menu_item(model) for model in session.scalars(statement)]

        return await self._read("get_menu_items", work)

    async def get_quick_actions(self) -> list[QuickAction]:
        def work(session: Session) -> list[QuickAction]:
            statement = (
                select(QuickActionModel)
                .where(QuickActionModel.is_active.is_(True))
                .order_by(QuickActionModel.display_order, QuickActionModel.id)
            )
            return [
                QuickAction(
                    action_id=QuickActionId(model.id),
                    label=_text(model.label_en, model.label_ar),
                    display_order=model.display_order,
                )
                for model in session.scalars(statement)
            ]

        return await self._read("get_quick_actions", work)

    async def get_orders(
        self,
        status: OrderStatus | None = None,
        hours_limit: float | None = None,
    ) -> list[Order]:
        cutoff = self._clock() - timedelta(hours=hours_limit) if hours_limit else None

        def work(session: Session) -> list[Order]:
            statement = (
                select(OrderModel)
                .options(
                    selectinload(OrderModel.items).selectinload(OrderItemModel.menu_item),
                    selectinload(OrderModel.items).selectinload(OrderItemModel.price),
                )
                .order_by(OrderModel.created_at.desc())
            )
            if status is not None:
                statement = statement.where(OrderModel.status == status.value)
            if cutoff is not None:
                statement = statement.where(OrderModel.created_at >= cutoff)
            return [self._to_order(model) for model in session.scalars(statement)]

        return await self._read("get_orders", work)

    async def get_quick_action_requests(self) -> list[QuickActionRequest]:
        def work(session: Session) -> list[QuickActionRequest]:
            statement = (
                select(QuickActionRequestModel)
                .options(selectinload(QuickActionRequestModel.action))
                .order_by(QuickActionRequestModel.created_at.desc())
            )
            return [self._to_quick_action_request(model) for model in session.scalars(statement)]

        return await self._read("get_quick_action_requests", work)

    # writes

    async def create_order(self, fields: NewOrder) -> OrderId:
        order_id = str(uuid4())
        created_at = self._clock()

        def work(session: Session) -> None:
            session.add(
                OrderModel(
                    id=order_id,
                    table_number=str(fields.table_number),
                    status=OrderStatus.PENDING.value,
                    diner_count=fields.diner_count,
                    subtotal=fields.subtotal,
                    tax=fields.tax,
                    total=fields.total,
                    created_at=created_at,
                )
            )
            session.commit()

        await self._run("create_order", work)
        await self._publish(
            ORDERS_TABLE,
            ChangeEventType.INSERT,
            {
                "id": order_id,
                "table_number": str(fields.table_number),
                "status": OrderStatus.PENDING.value,
                "total": fields.total,
                "created_at": created_at.isoformat(),
            },
        )
        return OrderId(order_id)

    async def create_order_item(self, fields: NewOrderItem) -> OrderItemId:
        order_item_id = str(uuid4())

        def work(session: Session) -> None:
            session.add(
                OrderItemModel(
                    id=order_item_id,
                    order_id=str(fields.order_id),
                    item_id=str(fields.item_id),
                    price_id=str(fields.price_id) if fields.price_id is not None else None,
                    quantity=fields.quantity,
                    notes=fields.notes,
                    created_at=self._clock(),
                )
            )
            session.commit()

        await self._run("create_order_item", work)
        await self._publish(
            ORDER_ITEMS_TABLE,
            ChangeEventType.INSERT,
            {
                "id": order_item_id,
                "order_id": str(fields.order_id),
                "item_id": str(fields.item_id),
                "quantity": fields.quantity,
            },
        )
        return OrderItemId(order_item_id)

    async def create_item_price(self, fields: NewItemPrice) -> PriceVariantId:
        price_id = str(uuid4())

        def work(session: Session) -> None:
            session.add(
                ItemPriceModel(
                    id=price_id,
                    item_id=str(fields.item_id),
                    size_en=fields.size.en,
                    size_ar=fields.size.ar,
                    price=fields.price,
                    display_order=fields.display_order,
                )
            )
            session.commit()

        await self._run("create_item_price", work)
        await self._publish(
            ITEM_PRICES_TABLE,
            ChangeEventType.INSERT,
            {"id": price_id, "item_id": str(fields.item_id), "price": fields.price},
        )
        return PriceVariantId(price_id)

    async def delete_item_price(self, price_id: PriceVariantId) -> None:
        def work(session: Session) -> int:
            session.execute(
                update(OrderItemModel)
                .where(OrderItemModel.price_id == str(price_id))
                .values(price_id=None)
            )
            result = session.execute(delete(ItemPriceModel).where(ItemPriceModel.id == str(price_id)))
            session.commit()
            return result.rowcount

        await self._delete("delete_item_price", ITEM_PRICES_TABLE, str(price_id), work)

    async def create_quick_action_request(
        self, fields: NewQuickActionRequest
    ) -> QuickActionRequestId:
        request_id = str(uuid4())
        created_at = self._clock()

        def work(session: Session) -> None:
            session.add(
                QuickActionRequestModel(
                    id=request_id,
                    table_number=str(fields.table_number),
                    action_id=str(fields.action_id),
                    status=QuickActionRequestStatus.PENDING.value,
                    created_at=created_at,
                )
            )
            session.commit()

        await self._run("create_quick_action_request", work)
        await self._publish(
            QUICK_ACTION_REQUESTS_TABLE,
            ChangeEventType.INSERT,
            {
                "id": request_id,
                "table_number": str(fields.table_number),
                "action_id": str(fields.action_id),
                "status": QuickActionRequestStatus.PENDING.value,
            },
        )
        return QuickActionRequestId(request_id)

    async def update_order_status(self, order_id: OrderId, status: OrderStatus) -> None:
        updated_at = self._clock()

        def work(session: Session) -> int:
            result = session.execute(
                update(OrderModel)
                .where(OrderModel.id == str(order_id))
                .values(status=status.value, updated_at=updated_at)
            )
            session.commit()
            return result.rowcount

        if await self._run("update_order_status", work) == 0:
            raise RecordNotFoundError("update_order_status", f"order {order_id} not found")
        await self._publish(
            ORDERS_TABLE,
            ChangeEventType.UPDATE,
            {"id": str(order_id), "status": status.value},
        )

    async def update_quick_action_request_status(
        self,
        request_id: QuickActionRequestId,
        status: QuickActionRequestStatus,
    ) -> None:
        values: dict[str, Any] = {"status": status.value}
        if status == QuickActionRequestStatus.COMPLETED:
            values["completed_at"] = self._clock()

        def work(session: Session) -> int:
            result = session.execute(
                update(QuickActionRequestModel)
                .where(QuickActionRequestModel.id == str(request_id))
                .values(**values)
            )
            session.commit()
            return result.rowcount

        if await self._run("update_quick_action_request_status", work) == 0:
            raise RecordNotFoundError(
                "update_quick_action_request_status",
                f"quick action request {request_id} not found",
            )
        await self._publish(
            QUICK_ACTION_REQUESTS_TABLE,
            ChangeEventType.UPDATE,
            {"id": str(request_id), "status": status.value},
        )

    async def delete_order(self, order_id: OrderId) -> None:
        def work(session: Session) -> int:
            session.execute(delete(OrderItemModel).where(OrderItemModel.order_id == str(order_id)))
            result = session.execute(delete(OrderModel).where(OrderModel.id == str(order_id)))
            session.commit()
            return result.rowcount

        await self._delete("delete_order", ORDERS_TABLE, str(order_id), work)

    async def delete_all_orders(self) -> int:
        def work(session: Session) -> int:
            count = session.scalar(select(func.count()).select_from(OrderModel)) or 0
            session.execute(delete(OrderItemModel))
            session.execute(delete(OrderModel))
            session.commit()
            return count

        deleted = await self._run("delete_all_orders", work)
        await self._publish(ORDERS_TABLE, ChangeEventType.DELETE, {"deleted": deleted})
        return deleted

    async def delete_category(self, category_id: CategoryId) -> None:
        def work(session: Session) -> int:
            session.execute(
                update(MenuItemModel)
                .where(MenuItemModel.category_id == str(category_id))
                .values(category_id=None)
            )
            result = session.execute(
                delete(CategoryModel).where(CategoryModel.id == str(category_id))
            )
            session.commit()
            return result.rowcount

        await self._delete("delete_category", CATEGORIES_TABLE, str(category_id), work)

    async def delete_menu_item(self, item_id: MenuItemId) -> None:
        def work(session: Session) -> int:
            price_ids = select(ItemPriceModel.id).where(ItemPriceModel.item_id == str(item_id))
            session.execute(
                update(OrderItemModel)
                .where(OrderItemModel.price_id.in_(price_ids))
                .values(price_id=None)
            )
            session.execute(
                update(OrderItemModel)
                .where(OrderItemModel.item_id == str(item_id))
                .values(item_id=None)
            )
            session.execute(delete(ItemPriceModel).where(ItemPriceModel.item_id == str(item_id)))
            result = session.execute(delete(MenuItemModel).where(MenuItemModel.id == str(item_id)))
            session.commit()
            return result.rowcount

        await self._delete("delete_menu_item", MENU_ITEMS_TABLE, str(item_id), work)

    async def delete_quick_action(self, action_id: QuickActionId) -> None:
        def work(session: Session) -> int:
            session.execute(
                update(QuickActionRequestModel)
                .where(QuickActionRequestModel.action_id == str(action_id))
                .values(action_id=None)
            )
            result = session.execute(
                delete(QuickActionModel).where(QuickActionModel.id == str(action_id))
            )
            session.commit()
            return result.rowcount

        await self._delete("delete_quick_action", QUICK_ACTIONS_TABLE, str(action_id), work)

    async def _delete(
        self,
        operation: str,
        table: str,
        record_id: str,
        work: Callable[[Session], int],
    ) -> None:
        if await self._run(operation, work) == 0:
            raise RecordNotFoundError(operation, f"{table} row {record_id} not found")
        await self._publish(table, ChangeEventType.DELETE, {"id": record_id})

    # row conversion

    @staticmethod
    def _to_menu_item(model: MenuItemModel) -> MenuItem:
        item_id = MenuItemId(model.id)
        return MenuItem(
            item_id=item_id,
            name=_text(model.name_en, model.name_ar),
            description=_optional_text(model.description_en, model.description_ar),
            category_id=CategoryId(model.category_id) if model.category_id else None,
            is_available=bool(model.is_available),
            prep_time_minutes=model.prep_time_minutes,
            image_url=model.image_url,
            variants=[
                PriceVariant(
                    price_id=PriceVariantId(price.id),
                    item_id=item_id,
                    size=_text(price.size_en, price.size_ar),
                    price=float(price.price),
                )
                for price in model.prices
            ],
        )

    @staticmethod
    def _to_order(model: OrderModel) -> Order:
        order_id = OrderId(model.id)
        items = []
        for item in model.items:
            menu_item = item.menu_item
            price = item.price
            items.append(
                OrderItem(
                    order_item_id=OrderItemId(item.id),
                    order_id=order_id,
                    item_id=MenuItemId(item.item_id) if item.item_id else None,
                    price_id=PriceVariantId(item.price_id) if item.price_id else None,
                    quantity=item.quantity,
                    notes=item.notes,
                    item_name=_text(menu_item.name_en, menu_item.name_ar) if menu_item else None,
                    size=_optional_text(price.size_en, price.size_ar) if price else None,
                    unit_price=float(price.price) if price is not None else None,
                )
            )
        return Order(
            order_id=order_id,
            table_number=TableNumber(model.table_number),
            status=OrderStatus(model.status),
            placed_at=_as_utc(model.created_at),
            items=items,
            diner_count=model.diner_count,
            total=float(model.total) if model.total is not None else None,
        )

    @staticmethod
    def _to_quick_action_request(model: QuickActionRequestModel) -> QuickActionRequest:
        action = model.action
        return QuickActionRequest(
            request_id=QuickActionRequestId(model.id),
            table_number=TableNumber(model.table_number),
            action_id=QuickActionId(model.action_id) if model.action_id else None,
            status=QuickActionRequestStatus(model.status),
            requested_at=_as_utc(model.created_at),
            action_label=_text(action.label_en, action.label_ar) if action else None,
        )
