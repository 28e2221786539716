from __future__ import annotations

from datetime import datetime

import pytest
from bson import ObjectId
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from goosepage import Document
from goosepage.integrations.fastapi import (
    CursorParams,
    KeysetPageResponse,
    init_app,
    register_exception_handlers,
)
from goosepage.paging.cursor import decode_cursor
from goosepage.utils.exceptions import DocumentNotFound, GoosepageError, InvalidPagination
from goosepage.utils.pagination import KeysetPage


class Note(Document):
    text: str


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/params")
    async def params(paging: CursorParams = Depends()):
        request = paging.to_request()
        return {"limit": request.limit, "sort": request.sort, "after": request.after, "before": request.before}

    @app.get("/decode")
    async def decode(cursor: str):
        return {"values": len(decode_cursor(cursor))}

    @app.get("/missing")
    async def missing():
        raise DocumentNotFound("Note abc not found")

    @app.get("/error")
    async def error():
        raise GoosepageError("Something went wrong")

    @app.get("/page")
    async def page():
        oid = ObjectId("65f1c2a9e4b0a1b2c3d4e5f6")
        keyset_page = KeysetPage(
            items=[{"_id": oid, "at": datetime(2024, 1, 2, 3, 4, 5)}, Note(_id=oid, text="hi")],
            limit=2,
            has_next=True,
            has_previous=False,
            next_cursor="abc",
        )
        return KeysetPageResponse.from_page(keyset_page)

    return app


class TestCursorParams:
    def test_defaults(self):
        params = CursorParams()
        assert params.limit is None
        assert params.sort == []
        assert params.to_request().cursor is None

    def test_sort_parsing(self):
        params = CursorParams(sort="-created_at, name,,")
        assert params.sort == ["-created_at", "name"]

    def test_conflicting_cursors(self):
        with pytest.raises(InvalidPagination):
            CursorParams(after="a", before="b").to_request()

    def test_query_string(self):
        client = TestClient(_app())
        resp = client.get("/params", params={"limit": "abc", "sort": "-age", "after": "xyz"})
        assert resp.status_code == 200
        assert resp.json() == {"limit": "abc", "sort": ["-age"], "after": "xyz", "before": None}

    def test_conflicting_cursors_are_400(self):
        client = TestClient(_app())
        resp = client.get("/params", params={"after": "a", "before": "b"})
        assert resp.status_code == 400


class TestExceptionHandlers:
    def test_malformed_cursor_is_400(self):
        resp = TestClient(_app()).get("/decode", params={"cursor": "nope"})
        assert resp.status_code == 400
        assert "corrupt" in resp.json()["detail"]

    def test_not_found_is_404(self):
        resp = TestClient(_app()).get("/missing")
        assert resp.status_code == 404
        assert "not found" in resp.json()["detail"]

    def test_other_errors_are_500(self):
        resp = TestClient(_app()).get("/error")
        assert resp.status_code == 500
        assert "Something went wrong" in resp.json()["detail"]


class TestKeysetPageResponse:
    def test_from_page(self):
        page = KeysetPage(items=[{"a": 1}], limit=1, has_next=False, has_previous=True, previous_cursor="p", total_count=7)
        resp = KeysetPageResponse[dict].from_page(page)
        assert resp.items == [{"a": 1}]
        assert resp.has_previous is True
        assert resp.previous_cursor == "p"
        assert resp.next_cursor is None
        assert resp.total_count == 7

    def test_bson_values_serialize(self):
        resp = TestClient(_app()).get("/page")
        assert resp.status_code == 200
        body = resp.json()
        assert body["items"][0] == {"_id": "65f1c2a9e4b0a1b2c3d4e5f6", "at": "2024-01-02T03:04:05"}
        assert body["items"][1] == {"_id": "65f1c2a9e4b0a1b2c3d4e5f6", "text": "hi"}
        assert body["has_next"] is True
        assert body["next_cursor"] == "abc"


def test_init_app_connects():
    app = init_app(FastAPI(), "mongodb://localhost:27017/goosepage_test_fastapi")

    with TestClient(app):
        from goosepage.core.connection import _databases

        assert _databases["default"].name == "goosepage_test_fastapi"

    from goosepage.core.connection import _databases

    assert "default" not in _databases
