"""Document references and their batch population.

A Ref[Target] field stores the target's ObjectId in MongoDB. populate()
swaps the ObjectId for the loaded Target instance after a query ran; paged
queries do this after the page is assembled, so cursors are always built
from the stored ObjectIds.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, TypeVar

from bson import ObjectId
from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import CoreSchema, core_schema

from goosepage.lifecycle.observability import track_query
from goosepage.utils.types import ID_FIELD, MAX_POPULATE_DEPTH

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Ref(Generic[T]):
    """Reference to another Document, usable as a field type.

    Holds an ObjectId until populated, then the referenced document. Accepts
    the target class or its name: Ref[Company] or Ref["Company"].
    """

    __ref_target__: ClassVar[Any] = None

    def __class_getitem__(cls, target: Any) -> Any:
        name = target if isinstance(target, str) else target.__name__
        return type(f"Ref[{name}]", (Ref,), {"__ref_target__": target})

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                cls._serialize, info_arg=True, when_used="unless-none"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return {"anyOf": [{"type": "string", "pattern": "^[0-9a-f]{24}$"}, {"type": "object"}]}

    @classmethod
    def _validate(cls, value: Any) -> Any:
        from goosepage.core.document import Document

        if value is None or isinstance(value, (ObjectId, Document)):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        raise ValueError(f"Invalid reference: {value!r}")

    @staticmethod
    def _serialize(value: Any, info: Any) -> Any:
        # Python mode keeps ObjectIds so documents are stored unchanged
        if isinstance(value, ObjectId):
            return str(value) if info.mode == "json" else value
        return value.model_dump(by_alias=True, mode=info.mode)


def ref_target(doc_class: type, field: str) -> type:
    """Resolve the Document class a Ref field points to.

    Raises:
        ValueError: If the field is not a Ref or names an unknown document
    """
    from goosepage.core.document import _document_registry

    info = doc_class.model_fields.get(field)
    if info is None:
        raise ValueError(f"{doc_class.__name__} has no field '{field}'")

    target = _find_ref_target(info.annotation)
    if target is None:
        raise ValueError(f"Field '{field}' on {doc_class.__name__} is not a Ref")
    if isinstance(target, str):
        try:
            return _document_registry[target]
        except KeyError:
            raise ValueError(
                f"Cannot resolve reference '{target}'. "
                f"Known documents: {sorted(_document_registry)}"
            ) from None
    return target


def _find_ref_target(annotation: Any) -> Any:
    # Unwrap Optional[Ref[...]] and friends
    if isinstance(annotation, type) and issubclass(annotation, Ref):
        return annotation.__ref_target__
    for arg in getattr(annotation, "__args__", ()):
        target = _find_ref_target(arg)
        if target is not None:
            return target
    return None


class PopulateEngine:
    """Resolves Ref fields across a batch of documents.

    Every distinct target is loaded once per engine: one $in query per field
    and level, never one query per document.
    """

    def __init__(self) -> None:
        self._cache: dict[tuple[str, ObjectId], Any] = {}

    async def populate(self, docs: list[Any], path: str) -> None:
        """Populate a field, or a dotted chain of fields, on `docs`.

        "author.company" populates author on every document, then company
        on the distinct authors found.

        Raises:
            ValueError: If the path is empty, too deep, or not a Ref chain
        """
        parts = path.split(".")
        if any(not part for part in parts):
            raise ValueError(f"Invalid populate path (empty segment): {path!r}")
        if len(parts) > MAX_POPULATE_DEPTH:
            raise ValueError(f"Populate path exceeds maximum depth ({MAX_POPULATE_DEPTH}): {path}")

        level = list(docs)
        for part in parts:
            if not level:
                break
            await self.populate_field(level, part)
            resolved = {}
            for doc in level:
                value = getattr(doc, part, None)
                if value is not None and not isinstance(value, ObjectId):
                    resolved.setdefault(value.id, value)
            level = list(resolved.values())

    async def populate_field(self, docs: list[Any], field: str) -> None:
        waiting: dict[ObjectId, list[Any]] = {}
        for doc in docs:
            value = getattr(doc, field)
            if isinstance(value, ObjectId):
                waiting.setdefault(value, []).append(doc)
        if not waiting:
            return

        target = ref_target(type(docs[0]), field)
        collection_name = target._collection_name
        missing = [oid for oid in waiting if (collection_name, oid) not in self._cache]

        if missing:
            query = {ID_FIELD: {"$in": missing}}
            async with track_query("populate", collection_name, target.__name__, filter=query) as ctx:
                found = [raw async for raw in target.get_collection().find(query)]
                ctx["result_count"] = len(found)
            for raw in found:
                self._cache[(collection_name, raw[ID_FIELD])] = target._from_mongo(raw)
            if len(found) < len(missing):
                logger.debug(
                    "%d of %d %s references are dangling",
                    len(missing) - len(found),
                    len(missing),
                    target.__name__,
                )

        for oid, holders in waiting.items():
            resolved = self._cache.get((collection_name, oid))
            if resolved is None:
                continue
            for doc in holders:
                object.__setattr__(doc, field, resolved)


async def populate_documents(docs: list[Any], fields: list[str]) -> None:
    """Populate each of `fields` (plain or dotted) on `docs` with one engine."""
    if not docs or not fields:
        return
    engine = PopulateEngine()
    for field in fields:
        await engine.populate(docs, field)
