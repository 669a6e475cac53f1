"""Persistence port for the competition core.

The lifecycle and aggregator only talk to :class:`Repository`. The Flask app
wires :class:`SqlRepository` instances over the SQLAlchemy models; tests wire
an in-memory fake.
"""
import abc
import logging
import uuid
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class _DeleteField:
    def __repr__(self):
        return 'DELETE_FIELD'


# Placed as a value in ``update`` changes to remove the field from the record.
DELETE_FIELD = _DeleteField()

Callback = Callable[[List[Any]], None]


def new_id() -> str:
    return uuid.uuid4().hex


class Repository(abc.ABC):
    """One collection of records (houses, players, categories, events...)."""

    def __init__(self):
        self._subscribers: List[Callback] = []

    @abc.abstractmethod
    def get_all(self) -> List[Any]:
        ...

    @abc.abstractmethod
    def get_by_id(self, record_id: str) -> Optional[Any]:
        ...

    @abc.abstractmethod
    def create(self, data: Dict[str, Any]) -> str:
        ...

    @abc.abstractmethod
    def update(self, record_id: str, changes: Dict[str, Any]) -> None:
        ...

    @abc.abstractmethod
    def delete(self, record_id: str) -> None:
        ...

    def subscribe(self, callback: Callback) -> Callable[[], None]:
        """Register ``callback`` to receive the full collection after every write.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.get_all()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                # The write is already committed; one bad listener must not hide it from the rest
                logger.exception(f"[subscriber-error] repository={type(self).__name__}")


def encode_value(value):
    """Turn domain values into what a JSON/SQL column stores."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return value


class SqlRepository(Repository):
    """Repository over a Flask-SQLAlchemy model exposing ``to_domain()``."""

    def __init__(self, db, model, order_by=None):
        super().__init__()
        self.db = db
        self.model = model
        self.order_by = order_by

    def get_all(self):
        query = self.model.query
        if self.order_by is not None:
            query = query.order_by(getattr(self.model, self.order_by))
        return [row.to_domain() for row in query.all()]

    def get_by_id(self, record_id):
        if not record_id:
            return None
        row = self.db.session.get(self.model, record_id)
        return row.to_domain() if row else None

    def create(self, data):
        fields = {k: encode_value(v) for k, v in data.items() if v is not DELETE_FIELD}
        fields.setdefault('id', new_id())
        row = self.model(**fields)
        self.db.session.add(row)
        self.db.session.commit()
        self.notify()
        return row.id

    def update(self, record_id, changes):
        row = self.db.session.get(self.model, record_id)
        if row is None:
            raise KeyError(record_id)
        for key, value in changes.items():
            setattr(row, key, None if value is DELETE_FIELD else encode_value(value))
        self.db.session.add(row)
        self.db.session.commit()
        self.notify()

    def delete(self, record_id):
        row = self.db.session.get(self.model, record_id)
        if row is None:
            raise KeyError(record_id)
        self.db.session.delete(row)
        self.db.session.commit()
        self.notify()
