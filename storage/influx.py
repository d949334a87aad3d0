from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

import httpx

from models.points import Batch
from settings import get_settings
from storage.base import WriteError
from storage.line_protocol import encode_points

logger = logging.getLogger(__name__)


class InfluxLineSink:
    """Writes batches to the InfluxDB 1.x ``/write`` HTTP endpoint in line protocol."""

    def __init__(
        self,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        auth = (username, password or "") if username else None
        self._client = client or httpx.Client(
            base_url=self.base_url, timeout=timeout, auth=auth
        )

    def write(self, batch: Batch) -> None:
        if not batch.points:
            logger.debug(
                "Nothing to write for empty batch",
                extra={"database": batch.config.database},
            )
            return

        body = encode_points(batch.points, batch.config.precision)
        try:
            response = self._client.post(
                "/write",
                params={
                    "db": batch.config.database,
                    "precision": batch.config.precision.value,
                },
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text.strip() or "no detail provided."
            raise WriteError(
                f"InfluxDB rejected batch with status {exc.response.status_code}: {detail}"
            ) from exc
        except httpx.HTTPError as exc:
            raise WriteError(f"InfluxDB write to {self.base_url} failed: {exc}") from exc

    def close(self) -> None:
        self._client.close()


@lru_cache
def build_default_influx_sink(base_url: Optional[str] = None) -> InfluxLineSink:
    settings = get_settings()
    return InfluxLineSink(
        base_url=settings.influx_url if base_url is None else base_url,
        username=settings.influx_username,
        password=settings.influx_password,
        timeout=settings.influx_timeout,
    )
