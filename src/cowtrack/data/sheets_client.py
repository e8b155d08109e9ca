"""HTTP client for downloading a published Google Sheets CSV export."""

from __future__ import annotations

import io
import logging
import time

import httpx

from .movements_repository import build_dataset, read_csv_rows
from ..config import settings
from ..models.domain import Dataset

logger = logging.getLogger(__name__)


class SheetFetchError(RuntimeError):
    """Raised when the movement sheet cannot be downloaded."""


class SheetsClient:
    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.sheet_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.sheet_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.sheet_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            follow_redirects=True,
            transport=self._transport,
        )

    def fetch_csv(self, url: str) -> str:
        """Return the CSV body, retrying transient failures with exponential backoff."""
        if not url:
            raise ValueError("Sheet CSV URL is not configured.")

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url)
                    response.raise_for_status()
                    body = response.text
                    if body.lstrip().lower().startswith("<!doctype html") or body.lstrip().startswith("<html"):
                        raise SheetFetchError(
                            f"Sheet URL returned an HTML page instead of CSV; is the sheet published? ({url})"
                        )
                    return body
                except httpx.HTTPStatusError as exc:
                    code = exc.response.status_code
                    if 400 <= code < 500 and code != 429:
                        raise SheetFetchError(f"Sheet request rejected with HTTP {code}: {url}") from exc
                    attempt += 1
                    if attempt > self.max_retries:
                        raise SheetFetchError(f"Sheet request failed with HTTP {code} after {attempt} attempts") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Sheet HTTP {code}, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Sheet download failed after {self.max_retries} retries: {exc}")
                        raise SheetFetchError(f"Unable to reach sheet at {url}: {exc}") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Sheet network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
        finally:
            client.close()


def fetch_sheet_dataset(url: str, client: SheetsClient | None = None) -> Dataset:
    """Download the published sheet and map it onto a dataset."""

    body = (client or SheetsClient()).fetch_csv(url)
    rows = read_csv_rows(io.StringIO(body.lstrip("\ufeff")))
    logger.info(f"Fetched {len(rows)} sheet rows from {url}")
    return build_dataset(rows)
