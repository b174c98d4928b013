"""Google Sheets v4 client for the remote spreadsheet store."""

import logging
from typing import Any

import httpx

from autoexpense.core.exceptions import SessionExpiredError
from autoexpense.core.tokens import TokenProvider
from autoexpense.storage.collections import Collection
from autoexpense.storage.layout import (
    BLOCKS,
    CATEGORY_HEADERS,
    CONFIG_SHEET,
    SHEET_TITLES,
    TRANSACTION_HEADERS,
    TRANSACTIONS_SHEET,
    item_to_row,
)

logger = logging.getLogger(__name__)


class SheetsClient:
    """Thin async wrapper over the values and batchUpdate endpoints.

    Every request carries a bearer token from the shared TokenProvider; an
    HTTP 401 triggers one silent refresh and retry before SessionExpiredError
    is raised. Other non-2xx responses raise httpx.HTTPStatusError.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        self._tokens = token_provider
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @staticmethod
    def spreadsheet_url(spreadsheet_id: str) -> str:
        return f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit"

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        token = await self._tokens.get_access_token()
        response = await self._http.request(
            method, url, headers={"Authorization": f"Bearer {token}"}, **kwargs
        )
        if response.status_code == 401:
            logger.info("Sheets token rejected, refreshing once")
            token = await self._tokens.refresh()
            response = await self._http.request(
                method, url, headers={"Authorization": f"Bearer {token}"}, **kwargs
            )
            if response.status_code == 401:
                raise SessionExpiredError(details={"api": "sheets"})
        response.raise_for_status()
        if not response.content:
            return {}
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Malformed Sheets API response")
        return payload

    # Values API

    async def get_values(self, spreadsheet_id: str, range_: str) -> list[list[str]]:
        payload = await self._request("GET", f"/{spreadsheet_id}/values/{range_}")
        values = payload.get("values", [])
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise ValueError(f"Malformed values payload for {range_}")
        return values

    async def update_values(self, spreadsheet_id: str, range_: str, values: list[list[str]]) -> None:
        await self._request(
            "PUT",
            f"/{spreadsheet_id}/values/{range_}",
            params={"valueInputOption": "RAW"},
            json={"range": range_, "majorDimension": "ROWS", "values": values},
        )

    async def append_values(self, spreadsheet_id: str, range_: str, values: list[list[str]]) -> None:
        await self._request(
            "POST",
            f"/{spreadsheet_id}/values/{range_}:append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"range": range_, "majorDimension": "ROWS", "values": values},
        )

    async def clear_values(self, spreadsheet_id: str, range_: str) -> None:
        await self._request("POST", f"/{spreadsheet_id}/values/{range_}:clear", json={})

    async def batch_update_values(
        self, spreadsheet_id: str, data: list[tuple[str, list[list[str]]]]
    ) -> None:
        await self._request(
            "POST",
            f"/{spreadsheet_id}/values:batchUpdate",
            json={
                "valueInputOption": "RAW",
                "data": [{"range": range_, "values": values} for range_, values in data],
            },
        )

    # Spreadsheet API

    async def batch_update(self, spreadsheet_id: str, requests: list[dict]) -> dict[str, Any]:
        return await self._request(
            "POST", f"/{spreadsheet_id}:batchUpdate", json={"requests": requests}
        )

    async def _sheet_properties(self, spreadsheet_id: str) -> list[dict]:
        payload = await self._request(
            "GET", f"/{spreadsheet_id}", params={"fields": "sheets.properties"}
        )
        return [sheet.get("properties", {}) for sheet in payload.get("sheets", [])]

    async def get_sheet_titles(self, spreadsheet_id: str) -> list[str]:
        return [props.get("title", "") for props in await self._sheet_properties(spreadsheet_id)]

    async def get_sheet_id(self, spreadsheet_id: str, title: str) -> int:
        """Resolve a tab title to its numeric sheetId.

        Raises:
            KeyError: If no tab has that title
        """
        for props in await self._sheet_properties(spreadsheet_id):
            if props.get("title") == title:
                return int(props.get("sheetId", 0))
        raise KeyError(title)

    async def create_spreadsheet(self, title: str, sheet_titles: list[str] | None = None) -> str:
        """Create a spreadsheet with the given tabs and return its id."""
        payload = await self._request(
            "POST",
            "",
            json={
                "properties": {"title": title},
                "sheets": [
                    {"properties": {"title": sheet_title}}
                    for sheet_title in (sheet_titles or SHEET_TITLES)
                ],
            },
        )
        spreadsheet_id = payload.get("spreadsheetId")
        if not spreadsheet_id:
            raise ValueError("Create response did not include a spreadsheetId")
        logger.info("Created spreadsheet", extra={"spreadsheet_id": spreadsheet_id})
        return spreadsheet_id

    # Layout

    async def initialize_spreadsheet(
        self, spreadsheet_id: str, seed: dict[Collection, list[dict]] | None = None
    ) -> None:
        """Write every block header plus optional seed rows in one batch."""
        seed = seed or {}
        data: list[tuple[str, list[list[str]]]] = []
        for collection, block in BLOCKS.items():
            data.append((block.header_range, [list(block.headers)]))
            rows = [item_to_row(collection, item) for item in seed.get(collection, [])]
            if rows:
                data.append((block.rows_range(len(rows)), rows))
        await self.batch_update_values(spreadsheet_id, data)

    async def validate_format(self, spreadsheet_id: str) -> bool:
        """Check that a spreadsheet follows the expected layout.

        Both tabs must exist, the Transactions header must match exactly and
        the Categories block header must match exactly. Nothing is written.

        Returns:
            True if the layout matches, False otherwise (including when the
            spreadsheet cannot be found or is not shared with the account)
        """
        try:
            titles = await self.get_sheet_titles(spreadsheet_id)
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (403, 404):
                logger.info(
                    "Spreadsheet not accessible",
                    extra={"status_code": e.response.status_code},
                )
                return False
            raise

        if TRANSACTIONS_SHEET not in titles or CONFIG_SHEET not in titles:
            logger.info("Spreadsheet is missing required tabs", extra={"titles": titles})
            return False

        tx_header = await self.get_values(
            spreadsheet_id, BLOCKS[Collection.TRANSACTIONS].header_range
        )
        if not tx_header or [str(c) for c in tx_header[0]] != TRANSACTION_HEADERS:
            logger.info("Transactions header mismatch")
            return False

        category_header = await self.get_values(
            spreadsheet_id, BLOCKS[Collection.CATEGORIES].header_range
        )
        if not category_header or [str(c) for c in category_header[0]] != CATEGORY_HEADERS:
            logger.info("Categories header mismatch")
            return False

        return True

    async def aclose(self) -> None:
        await self._http.aclose()
