import pytest
import pytest_asyncio
from pymongo.errors import PyMongoError

from goosepage import connect, disconnect, disable_tracing
from goosepage.core.connection import _databases

MONGO_URI = "mongodb://localhost:27017/goosepage_test"


@pytest.fixture(autouse=True)
def reset_tracing():
    """Reset observability state between tests."""
    yield
    disable_tracing()


@pytest_asyncio.fixture
async def mongo_connection():
    """Connect to localhost MongoDB before the test, drop the DB after.

    Skips the test when no server answers.
    """
    db = await connect(MONGO_URI, serverSelectionTimeoutMS=1000)
    try:
        await db.command("ping")
    except PyMongoError:
        await disconnect()
        pytest.skip("MongoDB is not available on localhost:27017")
    yield db
    # Reconnect if the test disconnected (e.g., connection tests)
    if "default" not in _databases:
        db = await connect(MONGO_URI, serverSelectionTimeoutMS=1000)
    for name in await db.list_collection_names():
        await db.drop_collection(name)
    await disconnect()
