from __future__ import annotations

import asyncio
from dataclasses import dataclass

from qrdine.application.ports.gateway import PersistenceGateway
from qrdine.domain.menu.entities import Category, MenuItem
from qrdine.domain.quick_action.entities import QuickAction


@dataclass(frozen=True)
class MenuCatalog:
    categories: list[Category]
    items: list[MenuItem]
    quick_actions: list[QuickAction]


class GetMenu:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway

    async def execute(self) -> MenuCatalog:
        categories, items, quick_actions = await asyncio.gather(
            self._gateway.get_categories(),
            self._gateway.get_menu_items(),
            self._gateway.get_quick_actions(),
        )
        return MenuCatalog(categories=categories, items=items, quick_actions=quick_actions)
