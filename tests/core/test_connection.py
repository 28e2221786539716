import pytest

from goosepage import connect, disconnect, get_database
from goosepage.core.connection import _extract_db_name, get_client
from goosepage.utils.exceptions import NotConnected


class TestExtractDbName:
    def test_plain_uri(self):
        assert _extract_db_name("mongodb://localhost:27017/shop") == "shop"

    def test_query_string_ignored(self):
        assert _extract_db_name("mongodb+srv://u:p@cluster.example.net/app_db?retryWrites=true") == "app_db"

    @pytest.mark.parametrize("uri", ["", "localhost/db", "mongodb://localhost:27017", "mongodb://localhost/"])
    def test_missing_parts_raise(self, uri):
        with pytest.raises(ValueError):
            _extract_db_name(uri)

    def test_invalid_name_raises(self):
        with pytest.raises(ValueError, match="Invalid database name"):
            _extract_db_name("mongodb://localhost/bad.name")


class TestConnect:
    async def test_get_database_returns_connected_db(self, mongo_connection):
        assert get_database().name == "goosepage_test"
        assert get_client() is not None

    async def test_multiple_aliases(self, mongo_connection):
        db2 = await connect("mongodb://localhost:27017/goosepage_test_alt", alias="secondary")
        assert db2.name == "goosepage_test_alt"
        assert get_database("secondary").name == "goosepage_test_alt"
        assert get_database("default").name == "goosepage_test"
        await disconnect("secondary")

    async def test_disconnect_removes_connection(self, mongo_connection):
        await disconnect()
        with pytest.raises(NotConnected):
            get_database()
        with pytest.raises(NotConnected):
            get_client()
