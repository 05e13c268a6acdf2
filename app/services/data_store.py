from sqlalchemy.orm import Session
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Type, TypeVar
import logging

from ..core.config import settings
from ..core.database import Base
from ..core.exceptions import NotFound, ValidationError
from ..core.policy import Operation, authorize, is_allowed
from ..core.security import Identity

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

def record_fields(record) -> Dict[str, Any]:
    """Column values of a mapped row as a plain dict."""
    return {column.name: getattr(record, column.name) for column in record.__table__.columns}

class DataStore(Generic[ModelT]):
    """
    Table-per-model store: create, get, update, delete and list for one model.

    Every call names the caller and is checked against the model's grants
    before anything is read back or written.
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        required: Sequence[str] = (),
        indexed: Sequence[str] = ()
    ):
        self.db = db
        self.model = model
        self.model_name = model.__name__
        self.required = tuple(required)
        self.indexed = frozenset(indexed)

    def create(self, identity: Identity, fields: Mapping[str, Any]) -> ModelT:
        """Validate, authorize and insert a new row."""
        self._validate(fields)
        authorize(identity, self.model_name, Operation.CREATE, fields)

        record = self.model(**fields)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)

        logger.info(f"Created {self.model_name} {record.id}")
        return record

    def get(self, identity: Identity, record_id: str) -> ModelT:
        record = self._load(record_id)
        authorize(identity, self.model_name, Operation.READ, record_fields(record))
        return record

    def find(self, identity: Identity, record_id: str) -> Optional[ModelT]:
        """Like get, but None when the row does not exist."""
        record = self.db.query(self.model).filter(self.model.id == record_id).first()
        if record is None:
            return None
        authorize(identity, self.model_name, Operation.READ, record_fields(record))
        return record

    def update(self, identity: Identity, record_id: str, changes: Mapping[str, Any]) -> ModelT:
        """Apply a partial update; last write wins."""
        record = self._load(record_id)
        current = record_fields(record)
        authorize(identity, self.model_name, Operation.UPDATE, current)

        unknown = set(changes) - set(current)
        if unknown:
            raise ValidationError(f"Unknown fields for {self.model_name}: {sorted(unknown)}")
        if "id" in changes and changes["id"] != record_id:
            raise ValidationError(f"{self.model_name} id cannot be changed")

        # The row as it will look must still be within the caller's grants
        updated = {**current, **changes}
        self._validate(updated)
        authorize(identity, self.model_name, Operation.UPDATE, updated)

        for key, value in changes.items():
            setattr(record, key, value)

        self.db.commit()
        self.db.refresh(record)

        logger.info(f"Updated {self.model_name} {record_id}: {sorted(changes)}")
        return record

    def delete(self, identity: Identity, record_id: str) -> None:
        record = self._load(record_id)
        authorize(identity, self.model_name, Operation.DELETE, record_fields(record))

        self.db.delete(record)
        self.db.commit()

        logger.info(f"Deleted {self.model_name} {record_id}")

    def list(
        self,
        identity: Identity,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Sequence[str] = (),
        limit: Optional[int] = None
    ) -> List[ModelT]:
        """
        Equality lookup on indexed fields, sorted ascending by ``order_by``.

        Rows the caller may not read are left out of the result.
        """
        filters = filters or {}
        unindexed = set(filters) - self.indexed
        if unindexed:
            raise ValidationError(
                f"{self.model_name} cannot be looked up by {sorted(unindexed)}"
            )

        query = self.db.query(self.model)
        for field, value in filters.items():
            query = query.filter(getattr(self.model, field) == value)

        sort_columns = [getattr(self.model, field) for field in order_by]
        # Primary key breaks ties so repeated listings come back in the same order
        query = query.order_by(*sort_columns, self.model.id)
        query = query.limit(limit or settings.LIST_LIMIT)

        return [
            record for record in query.all()
            if is_allowed(identity, self.model_name, Operation.READ, record_fields(record))
        ]

    def _load(self, record_id: str) -> ModelT:
        record = self.db.query(self.model).filter(self.model.id == record_id).first()
        if record is None:
            raise NotFound(f"{self.model_name} {record_id} not found")
        return record

    def _validate(self, fields: Mapping[str, Any]) -> None:
        missing = [
            name for name in self.required
            if fields.get(name) is None or (isinstance(fields.get(name), str) and not fields.get(name).strip())
        ]
        if missing:
            raise ValidationError(
                f"{self.model_name} is missing required fields: {', '.join(missing)}"
            )
