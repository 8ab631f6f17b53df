"""
Document store backed by the SQL documents table.

Collections are schemaless: each document is a JSON body addressed by
(collection, doc_id). Queries support equality, range and membership
filters on top-level fields, which is all the reports need.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from sqlalchemy import select, delete
from db.engine import create_session_factory
from db.models import Document
from errors import DocumentNotFoundError
from transformation.quality import parse_timestamp

logger = logging.getLogger(__name__)

DOCUMENT_ID = '__id__'
DEFAULT_MEMBERSHIP_LIMIT = 10
TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%fZ'

# Fields range-filtered as timestamps; always stored in TIMESTAMP_FORMAT
TIMESTAMP_FIELDS = ('createdAt', 'timestamp', 'uploadedAt', 'submittedAt')

_OPERATORS = ('==', '<', '<=', '>', '>=', 'in')


@dataclass(frozen=True)
class Where:
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")
        if self.op == 'in' and not isinstance(self.value, (list, tuple, set, frozenset)):
            raise ValueError("'in' filters need a list of values")


def format_timestamp(value):
    """Render a datetime as a fixed-width UTC string; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def to_storable(value):
    """Convert a value into something the JSON column accepts."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {str(k): to_storable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_storable(v) for v in value]
    return value


def normalize_timestamp_fields(body):
    """
    Rewrite timestamp fields of a document body in TIMESTAMP_FORMAT.

    Values that cannot be read as a timestamp are kept unchanged.
    """
    for name in TIMESTAMP_FIELDS:
        value = body.get(name)
        if value is None:
            continue
        parsed = parse_timestamp(value)
        if parsed is None:
            logger.warning(f"Keeping unparseable {name} value {value!r} as-is")
            continue
        body[name] = format_timestamp(parsed)
    return body


def _column_for(field, sample):
    if field == DOCUMENT_ID:
        return Document.doc_id
    element = Document.data[field]
    if isinstance(sample, bool):
        return element.as_boolean()
    if isinstance(sample, (int, float)):
        return element.as_float()
    return element.as_string()


def _filter_value(field, value):
    if field in TIMESTAMP_FIELDS and not isinstance(value, datetime):
        parsed = parse_timestamp(value)
        if parsed is not None:
            return format_timestamp(parsed)
    return to_storable(value)


def _condition(where):
    if where.op == 'in':
        values = [_filter_value(where.field, v) for v in where.value]
        column = _column_for(where.field, values[0] if values else '')
        return column.in_(values)

    value = _filter_value(where.field, where.value)
    column = _column_for(where.field, value)
    if where.op == '==':
        return column == value
    if where.op == '<':
        return column < value
    if where.op == '<=':
        return column <= value
    if where.op == '>':
        return column > value
    return column >= value


def _as_record(document):
    record = dict(document.data or {})
    record['id'] = document.doc_id
    return record


class DocumentStore:
    """Read/write access to document collections."""

    def __init__(self, engine, membership_limit=DEFAULT_MEMBERSHIP_LIMIT):
        self.engine = engine
        self.membership_limit = membership_limit
        self._session_factory = create_session_factory(engine)

    def query(
        self,
        collection: str,
        filters: Sequence[Where] = (),
        order_by: Optional[Tuple[str, str]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Return the documents of a collection matching every filter.

        Documents come back as plain dicts with their identifier under 'id',
        ordered by `order_by` (field, 'asc'|'desc') or by identifier.
        """
        for where in filters:
            if where.op == 'in' and len(where.value) > self.membership_limit:
                raise ValueError(
                    f"'in' filters accept at most {self.membership_limit} values, "
                    f"got {len(where.value)}"
                )

        statement = select(Document).where(Document.collection == collection)
        for where in filters:
            if where.op == 'in' and not where.value:
                return []
            statement = statement.where(_condition(where))

        if order_by is not None:
            field, direction = order_by
            column = Document.doc_id if field == DOCUMENT_ID else Document.data[field].as_string()
            statement = statement.order_by(column.desc() if direction == 'desc' else column.asc())
        statement = statement.order_by(Document.doc_id)

        if limit is not None:
            statement = statement.limit(limit)

        with self._session_factory() as session:
            documents = session.scalars(statement).all()
            records = [_as_record(doc) for doc in documents]

        logger.debug(f"Query on '{collection}' returned {len(records)} documents")
        return records

    def get(self, collection, doc_id):
        with self._session_factory() as session:
            document = session.get(Document, (collection, doc_id))
            return _as_record(document) if document is not None else None

    def add(self, collection, data, doc_id=None):
        """
        Write a document, replacing any existing one with the same id.

        Returns the document id, generated when not given.
        """
        doc_id = doc_id or uuid.uuid4().hex[:20]
        body = normalize_timestamp_fields(
            to_storable({k: v for k, v in data.items() if k != 'id'})
        )
        with self._session_factory.begin() as session:
            session.merge(Document(collection=collection, doc_id=doc_id, data=body))
        logger.debug(f"Stored document {collection}/{doc_id}")
        return doc_id

    def update(self, collection, doc_id, fields):
        """Merge top-level fields into an existing document."""
        with self._session_factory.begin() as session:
            document = session.get(Document, (collection, doc_id))
            if document is None:
                raise DocumentNotFoundError(collection, doc_id)
            # Reassign so the JSON column is flagged dirty
            changes = normalize_timestamp_fields(to_storable(dict(fields)))
            document.data = {**(document.data or {}), **changes}
        logger.info(f"Updated {collection}/{doc_id}: {sorted(fields)}")

    def delete(self, collection, doc_id):
        with self._session_factory.begin() as session:
            result = session.execute(
                delete(Document).where(
                    Document.collection == collection,
                    Document.doc_id == doc_id
                )
            )
        return result.rowcount > 0
