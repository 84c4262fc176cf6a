"""Remote Order API.

OrderAPI is the port the synchronizer and checkout depend on. RestOrderAPI
talks to the hosted backend's REST interface:

    POST /rest/v1/orders        -> [{"id": ..., ...}]
    POST /rest/v1/order_items   -> 201, empty body
    GET  /rest/v1/menu_items    -> [{...}, ...]

Each call blocks on requests, so it runs on a worker thread; callers
await it like any other coroutine.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from kadepos.config.settings import Settings
from kadepos.core.constants import (
    DEFAULT_REQUEST_TIMEOUT_MS,
    MENU_ITEMS_TABLE,
    ORDER_ITEMS_TABLE,
    ORDERS_TABLE,
)
from kadepos.core.errors import RemoteWriteError
from kadepos.offline.models import MenuItem

logger = logging.getLogger("kadepos.remote.orders")


@dataclass(frozen=True)
class OrderItemRow:
    """One order_items row referencing a created remote order."""

    order_id: int | str
    product_id: int | str
    quantity: int
    unit_price: float


class OrderAPI(Protocol):
    """Remote order creation port."""

    async def create_order(self, total_amount: float, status: str,
                           created_at: str | None = None) -> int | str:
        ...

    async def create_order_items(self, rows: list[OrderItemRow]) -> None:
        ...

    async def list_menu_items(self) -> list[MenuItem]:
        ...


class RestOrderAPI:
    """OrderAPI backed by the hosted backend's REST endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_ms = timeout_ms
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RestOrderAPI":
        return cls(settings.backend_url, settings.api_key, settings.request_timeout_ms)

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _headers(self, prefer: str | None = None) -> dict:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "KadePOS/0.4",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(self, method: str, table: str, stage: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(
                method,
                self._url(table),
                timeout=self.timeout_ms / 1000,
                **kwargs,
            )
        except requests.RequestException as e:
            raise RemoteWriteError(f"{stage} request failed: {e}", stage=stage) from e

        if not response.ok:
            raise RemoteWriteError(
                f"{stage} request rejected with {response.status_code}: {response.text[:200]}",
                stage=stage,
                status_code=response.status_code,
            )
        return response

    def create_order_sync(self, total_amount: float, status: str,
                          created_at: str | None = None) -> int | str:
        """Insert one orders row and return its id."""
        row = {"total_amount": total_amount, "status": status}
        if created_at:
            row["created_at"] = created_at

        response = self._request(
            "POST", ORDERS_TABLE, "order",
            json=[row],
            headers=self._headers("return=representation"),
        )

        try:
            created = response.json()
        except ValueError as e:
            raise RemoteWriteError("order response was not JSON", stage="order",
                                   status_code=response.status_code) from e

        if isinstance(created, list):
            created = created[0] if created else {}
        if not isinstance(created, dict) or created.get("id") is None:
            raise RemoteWriteError("order response carried no id", stage="order",
                                   status_code=response.status_code)
        return created["id"]

    def create_order_items_sync(self, rows: list[OrderItemRow]) -> None:
        """Insert the order_items rows for one order."""
        payload = [
            {
                "order_id": row.order_id,
                "menu_item_id": row.product_id,
                "quantity": row.quantity,
                "price_at_time": row.unit_price,
            }
            for row in rows
        ]
        self._request(
            "POST", ORDER_ITEMS_TABLE, "items",
            json=payload,
            headers=self._headers("return=minimal"),
        )

    def list_menu_items_sync(self) -> list[MenuItem]:
        """Available menu items ordered by category."""
        response = self._request(
            "GET", MENU_ITEMS_TABLE, "menu",
            params={"select": "*", "is_available": "eq.true", "order": "category.asc"},
            headers=self._headers(),
        )
        try:
            rows = response.json()
        except ValueError as e:
            raise RemoteWriteError("menu response was not JSON", stage="menu",
                                   status_code=response.status_code) from e
        return [MenuItem.from_row(row) for row in rows]

    async def create_order(self, total_amount: float, status: str,
                           created_at: str | None = None) -> int | str:
        return await asyncio.to_thread(self.create_order_sync, total_amount, status, created_at)

    async def create_order_items(self, rows: list[OrderItemRow]) -> None:
        await asyncio.to_thread(self.create_order_items_sync, rows)

    async def list_menu_items(self) -> list[MenuItem]:
        return await asyncio.to_thread(self.list_menu_items_sync)

    def close(self):
        self.session.close()
