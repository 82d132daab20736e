# aquapark/editing/client.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from .catalog import FALLBACK_PAYMENT_METHODS
from .errors import ApiError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)


def _message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or body.get("msg") or f"HTTP {resp.status_code}"
    return f"HTTP {resp.status_code}"


class OrdersApiClient:
    """
    Thin httpx wrapper over the back-office API. Every failure, network or
    HTTP, surfaces as ApiError; nothing is retried.
    """

    def __init__(
        self,
        base_url: str = "",
        token: str | None = None,
        *,
        client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            log.warning("%s %s failed: %s", method, url, e)
            raise ApiError(f"Could not reach the server: {e}") from e
        if resp.status_code >= 400:
            msg = _message(resp)
            log.warning("%s %s -> %s: %s", method, url, resp.status_code, msg)
            try:
                payload = resp.json()
            except ValueError:
                payload = None
            raise ApiError(msg, status_code=resp.status_code, payload=payload)
        return resp.json()

    # ------------------------ orders ------------------------

    def orders_between(self, start: date | str, end: date | str) -> list[dict]:
        params = {"startDate": str(start), "endDate": str(end)}
        data = self._request("GET", "/api/orders/range-report", params=params)
        if not isinstance(data, list):
            raise ApiError("Unexpected data format received")
        return data

    def update_order(self, payload: dict) -> dict:
        return self._request("PUT", "/api/orders/update", json=payload)

    def delete_order(self, order_id: int) -> dict:
        return self._request("DELETE", f"/api/orders/{order_id}")

    # ------------------------ catalogs ------------------------

    @staticmethod
    def _archived_params(archived):
        return {} if archived is None else {"archived": "true" if archived else "false"}

    def ticket_types(self, archived: bool | None = None) -> list[dict]:
        return self._request("GET", "/api/tickets/ticket-types", params=self._archived_params(archived))

    def meals(self, archived: bool | None = None) -> list[dict]:
        return self._request("GET", "/api/meals", params=self._archived_params(archived))

    def payment_methods(self) -> list[dict]:
        try:
            return self._request("GET", "/api/orders/payment-methods")
        except ApiError as e:
            log.info("payment methods unavailable (%s), using built-in list", e.message)
            return list(FALLBACK_PAYMENT_METHODS)
