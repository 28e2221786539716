from goosepage.core.document import Document
from goosepage.core.queryset import QuerySet
from goosepage.core.reference import Ref
from goosepage.core.connection import connect, disconnect, get_database, get_client

__all__ = [
    "Document",
    "QuerySet",
    "Ref",
    "connect",
    "disconnect",
    "get_database",
    "get_client",
]
