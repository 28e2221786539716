from __future__ import annotations

import logging
import re

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from goosepage.utils.exceptions import NotConnected

logger = logging.getLogger(__name__)

_clients: dict[str, AsyncMongoClient] = {}
_databases: dict[str, AsyncDatabase] = {}

_DB_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


async def connect(uri: str, *, alias: str = "default", **client_kwargs) -> AsyncDatabase:
    """Connect to a MongoDB instance and register it under an alias.

    The client is created lazily by pymongo; the first query opens the
    socket. Extra keyword arguments go straight to AsyncMongoClient
    (e.g. serverSelectionTimeoutMS).

    Args:
        uri: MongoDB connection URI (must include database name).
        alias: Connection alias for multi-database setups.

    Returns:
        The AsyncDatabase instance.

    Raises:
        ValueError: If URI format is invalid
    """
    db_name = _extract_db_name(uri)
    previous = _clients.pop(alias, None)
    if previous is not None:
        logger.info("Replacing existing MongoDB connection for alias '%s'", alias)
        await previous.close()

    client = AsyncMongoClient(uri, **client_kwargs)
    db = client[db_name]
    _clients[alias] = client
    _databases[alias] = db
    logger.info("Connected to database '%s' with alias '%s'", db_name, alias)
    return db


async def disconnect(alias: str = "default") -> None:
    """Disconnect and remove a registered connection.

    Args:
        alias: Connection alias to disconnect
    """
    client = _clients.pop(alias, None)
    _databases.pop(alias, None)
    if client is not None:
        await client.close()
        logger.info("Disconnected from MongoDB (alias: '%s')", alias)


def get_database(alias: str = "default") -> AsyncDatabase:
    """Retrieve a registered database or raise NotConnected.

    Args:
        alias: Connection alias

    Returns:
        AsyncDatabase instance

    Raises:
        NotConnected: If no connection exists for the alias
    """
    try:
        return _databases[alias]
    except KeyError:
        raise NotConnected(
            f"No connection registered for alias '{alias}'. Call connect() first."
        ) from None


def get_client(alias: str = "default") -> AsyncMongoClient:
    """Retrieve a registered client or raise NotConnected.

    Args:
        alias: Connection alias

    Returns:
        AsyncMongoClient instance

    Raises:
        NotConnected: If no client exists for the alias
    """
    try:
        return _clients[alias]
    except KeyError:
        raise NotConnected(
            f"No client registered for alias '{alias}'. Call connect() first."
        ) from None


def _extract_db_name(uri: str) -> str:
    """Extract and validate the database name from a MongoDB URI.

    Raises:
        ValueError: If URI format is invalid or database name cannot be extracted
    """
    if not uri:
        raise ValueError("MongoDB URI cannot be empty")

    _, sep, rest = uri.partition("://")
    if not sep:
        raise ValueError(f"MongoDB URI must include a scheme, got '{uri}'")

    path = rest.split("?", 1)[0]
    _, slash, db_name = path.partition("/")
    if not slash or not db_name:
        raise ValueError(
            "Cannot extract database name from URI. "
            "Expected format: mongodb://host:port/database"
        )

    if not _DB_NAME_RE.match(db_name):
        raise ValueError(
            f"Invalid database name '{db_name}'. "
            f"Database names can only contain letters, numbers, underscores, and hyphens."
        )

    logger.debug("Extracted database name: %s", db_name)
    return db_name
