"""Unit tests for the Sheets client and the spreadsheet backend.

Google's API is replaced by an httpx.MockTransport handler.
"""

import json
from datetime import datetime, timezone
from urllib.parse import unquote

import httpx
import pytest

from autoexpense.core.exceptions import RemoteStoreError, SessionExpiredError
from autoexpense.core.ids import id_from_timestamp
from autoexpense.schemas.transaction import Transaction
from autoexpense.storage.backends import RemoteBackend
from autoexpense.storage.collections import Collection
from autoexpense.storage.layout import CATEGORY_HEADERS, TRANSACTION_HEADERS
from autoexpense.storage.sheets import SheetsClient

BASE = "https://sheets.test/v4/spreadsheets"
PREFIX = "/v4/spreadsheets"
SHEET = "sheet-1"

CREATED = datetime(2024, 10, 24, 11, 31, tzinfo=timezone.utc)
TX_ROWS = [
    ["2024-10-24T11:30:00+00:00", "WHOLEFDS MRKT", "14.50", "Groceries", "Unknown",
     "expense", "pending", "", CREATED.isoformat()],
    ["", "", "", "", "", "", "", "", ""],
    ["2024-10-23T09:00:00+00:00", "Uber", "250.00", "Transport", "Cash",
     "expense", "completed", "Email Automated", "2024-10-23T09:05:00+00:00"],
]
SHEET_PROPERTIES = {
    "sheets": [
        {"properties": {"title": "Transactions", "sheetId": 0}},
        {"properties": {"title": "Configuration", "sheetId": 77}},
    ]
}


class FakeSheetsApi:
    """Answers Sheets requests from canned responses and records every call."""

    def __init__(self):
        self.calls: list[tuple[str, str, dict]] = []
        self.auth_headers: list[str | None] = []
        self.values: dict[str, list[list[str]]] = {}
        self.properties = SHEET_PROPERTIES
        self.status_overrides: dict[tuple[str, str], int] = {}
        self.unauthorized_left = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = unquote(request.url.path)[len(PREFIX):]
        body = json.loads(request.content) if request.content else {}
        self.calls.append((request.method, path, body))
        self.auth_headers.append(request.headers.get("Authorization"))

        if self.unauthorized_left > 0:
            self.unauthorized_left -= 1
            return httpx.Response(401)
        if (request.method, path) in self.status_overrides:
            return httpx.Response(self.status_overrides[(request.method, path)])

        if request.method == "GET" and path == f"/{SHEET}":
            return httpx.Response(200, json=self.properties)
        if request.method == "GET" and "/values/" in path:
            range_ = path.split("/values/", 1)[1]
            return httpx.Response(200, json={"range": range_, "values": self.values.get(range_, [])})
        if request.method == "POST" and path == "":
            return httpx.Response(200, json={"spreadsheetId": "new-sheet"})
        return httpx.Response(200, json={})

    def calls_to(self, method: str, suffix: str) -> list[dict]:
        return [body for m, path, body in self.calls if m == method and path.endswith(suffix)]


@pytest.fixture
def api() -> FakeSheetsApi:
    return FakeSheetsApi()


@pytest.fixture
async def sheets(api, token_provider):
    http = httpx.AsyncClient(transport=httpx.MockTransport(api))
    yield SheetsClient(token_provider, BASE, http)
    await http.aclose()


@pytest.fixture
def backend(sheets) -> RemoteBackend:
    return RemoteBackend(sheets, SHEET)


class TestSheetsClient:
    async def test_get_values_sends_bearer_token(self, api, sheets):
        api.values["Transactions!A2:I"] = [["a", "b"]]

        assert await sheets.get_values(SHEET, "Transactions!A2:I") == [["a", "b"]]
        assert api.auth_headers == ["Bearer test-token"]

    async def test_401_refreshes_once_and_retries(self, api, sheets, token_provider):
        api.unauthorized_left = 1

        await sheets.get_values(SHEET, "Transactions!A2:I")

        assert token_provider.refreshes == 1
        assert len(api.calls) == 2

    async def test_repeated_401_raises_session_expired(self, api, sheets, token_provider):
        api.unauthorized_left = 2

        with pytest.raises(SessionExpiredError):
            await sheets.get_values(SHEET, "Transactions!A2:I")
        assert token_provider.refreshes == 1

    async def test_create_spreadsheet_returns_id(self, api, sheets):
        spreadsheet_id = await sheets.create_spreadsheet("Auto Expense 2024")

        assert spreadsheet_id == "new-sheet"
        body = api.calls_to("POST", "")[0]
        assert [s["properties"]["title"] for s in body["sheets"]] == ["Transactions", "Configuration"]

    async def test_initialize_writes_headers_and_seed(self, api, sheets):
        await sheets.initialize_spreadsheet(
            SHEET, {Collection.CATEGORIES: [{"id": "1", "name": "Food & Dining"}]}
        )

        data = api.calls_to("POST", "/values:batchUpdate")[0]["data"]
        ranges = {entry["range"]: entry["values"] for entry in data}
        assert ranges["Transactions!A1:I1"] == [TRANSACTION_HEADERS]
        assert ranges["Configuration!A1:E1"] == [CATEGORY_HEADERS]
        assert ranges["Configuration!A2:E2"] == [["1", "Food & Dining", "", "", ""]]
        assert "Configuration!R1:T1" in ranges


class TestValidateFormat:
    @pytest.fixture(autouse=True)
    def valid_headers(self, api):
        api.values["Transactions!A1:I1"] = [TRANSACTION_HEADERS]
        api.values["Configuration!A1:E1"] = [CATEGORY_HEADERS]

    async def test_valid_layout(self, sheets):
        assert await sheets.validate_format(SHEET) is True

    async def test_missing_configuration_tab(self, api, sheets):
        api.properties = {"sheets": [{"properties": {"title": "Transactions", "sheetId": 0}}]}

        assert await sheets.validate_format(SHEET) is False

    async def test_wrong_transaction_header(self, api, sheets):
        api.values["Transactions!A1:I1"] = [TRANSACTION_HEADERS[:-1] + ["Created"]]

        assert await sheets.validate_format(SHEET) is False

    async def test_missing_category_header(self, api, sheets):
        api.values["Configuration!A1:E1"] = []

        assert await sheets.validate_format(SHEET) is False

    @pytest.mark.parametrize("status_code", [403, 404])
    async def test_inaccessible_sheet(self, api, sheets, status_code):
        api.status_overrides[("GET", f"/{SHEET}")] = status_code

        assert await sheets.validate_format(SHEET) is False

    async def test_server_error_propagates(self, api, sheets):
        api.status_overrides[("GET", f"/{SHEET}")] = 500

        with pytest.raises(httpx.HTTPStatusError):
            await sheets.validate_format(SHEET)

    async def test_validation_never_writes(self, api, sheets):
        await sheets.validate_format(SHEET)

        assert {method for method, _, _ in api.calls} == {"GET"}


class TestRemoteBackend:
    async def test_reads_transactions_with_created_at_ids(self, api, backend):
        api.values["Transactions!A2:I"] = TX_ROWS

        items = await backend.get(Collection.TRANSACTIONS)

        assert [item["id"] for item in items] == [
            id_from_timestamp(CREATED),
            id_from_timestamp(datetime(2024, 10, 23, 9, 5, tzinfo=timezone.utc)),
        ]
        assert "notes" not in items[0]
        transaction = Transaction.model_validate(items[0])
        assert transaction.status == "pending"
        assert transaction.amount == "14.50"

    async def test_reads_config_block(self, api, backend):
        api.values["Configuration!G2:L"] = [["5", "Other", "card"]]

        items = await backend.get(Collection.PAYMENT_METHODS)

        assert items == [
            {"id": "5", "name": "Other", "type": "card", "icon": "", "color": "", "last4": ""}
        ]

    async def test_append_transaction_row(self, api, backend):
        await backend.append(
            Collection.TRANSACTIONS,
            {
                "id": "1729769460000",
                "merchant": "Uber",
                "amount": "250.00",
                "category": "Transport",
                "payment_method": None,
                "occurred_at": "2024-10-24T11:30:00Z",
                "type": "expense",
                "status": "completed",
                "notes": None,
                "created_at": "2024-10-24T11:31:00Z",
            },
        )

        body = api.calls_to("POST", "/values/Transactions!A:I:append")[0]
        assert body["values"] == [
            ["2024-10-24T11:30:00Z", "Uber", "250.00", "Transport", "", "expense",
             "completed", "", "2024-10-24T11:31:00Z"]
        ]

    async def test_update_rewrites_matching_row(self, api, backend):
        api.values["Transactions!A2:I"] = TX_ROWS
        target = id_from_timestamp(datetime(2024, 10, 23, 9, 5, tzinfo=timezone.utc))

        updated = await backend.update_by_id(
            Collection.TRANSACTIONS, target, {"merchant": "Uber", "amount": "300.00"}
        )

        assert updated is True
        assert api.calls_to("PUT", "/values/Transactions!A4:I4")

    async def test_delete_removes_sheet_row(self, api, backend):
        api.values["Transactions!A2:I"] = TX_ROWS

        assert await backend.delete_by_id(Collection.TRANSACTIONS, id_from_timestamp(CREATED))

        request = api.calls_to("POST", f"/{SHEET}:batchUpdate")[0]["requests"][0]
        assert request["deleteDimension"]["range"] == {
            "sheetId": 0,
            "dimension": "ROWS",
            "startIndex": 1,
            "endIndex": 2,
        }

    async def test_delete_unknown_id(self, api, backend):
        api.values["Transactions!A2:I"] = TX_ROWS

        assert await backend.delete_by_id(Collection.TRANSACTIONS, "42") is False
        assert not api.calls_to("POST", f"/{SHEET}:batchUpdate")

    async def test_put_replaces_block(self, api, backend):
        await backend.put(Collection.KEYWORDS, [{"id": "1", "keyword": "HDFC", "category": "expense"}])

        assert api.calls_to("POST", "/values/Configuration!N2:P:clear")
        assert api.calls_to("PUT", "/values/Configuration!N2:P2")[0]["values"] == [["1", "HDFC", "expense"]]

    async def test_write_failure_raises_remote_store_error(self, api, backend):
        api.status_overrides[("POST", f"/{SHEET}/values/Transactions!A:I:append")] = 500

        with pytest.raises(RemoteStoreError) as exc_info:
            await backend.append(Collection.TRANSACTIONS, {"merchant": "X"})

        assert exc_info.value.details["operation"] == "append"

    async def test_read_failure_propagates(self, api, backend):
        api.status_overrides[("GET", f"/{SHEET}/values/Transactions!A2:I")] = 503

        with pytest.raises(httpx.HTTPStatusError):
            await backend.get(Collection.TRANSACTIONS)
