"""
Request-scoped unit of work over SQLAlchemy Core tables.

An ``EntityStore`` wraps one connection for the lifetime of one request.
Every entity it hands out is tracked: the store keeps the instance together
with a copy of its column values taken when it was loaded (or inserted, or
last flushed). Callers mutate the instance in place; ``flush`` compares each
tracked instance against its snapshot and issues one UPDATE per entity that
touches exactly the columns whose values differ. Entities with no
differences produce no statement.

The identity map guarantees a given key resolves to the same in-memory
instance for the whole unit of work, so repeated loads neither hit the
database again nor produce diverging copies.
"""
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)

E = TypeVar("E")


class EntityNotFoundError(LookupError):
    """No row matches the given primary key."""

    def __init__(self, table: str, key: Any):
        super().__init__(f"{table} with key {key!r} not found")
        self.table = table
        self.key = key


class ImmutableFieldError(ValueError):
    """A tracked entity changed a column that may not be updated."""

    def __init__(self, table: str, key: Any, columns):
        super().__init__(f"{table} {key!r}: columns {', '.join(columns)} are not updatable")
        self.table = table
        self.key = key
        self.columns = tuple(columns)


@dataclass(frozen=True)
class EntityMapping(Generic[E]):
    """Binds an entity dataclass to its table.

    Entity attribute names must match the table's column names.
    """
    table: Table
    entity_type: Type[E]
    key: str = "id"
    updatable: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.table.columns)

    @property
    def key_column(self):
        return self.table.c[self.key]

    def to_values(self, entity: E) -> Dict[str, Any]:
        return {name: getattr(entity, name) for name in self.columns}

    def from_row(self, row) -> E:
        return self.entity_type(**dict(row._mapping))


@dataclass(frozen=True)
class FlushedUpdate:
    """One UPDATE statement issued by a flush."""
    table: str
    key: Any
    columns: Tuple[str, ...]


@dataclass
class _Tracked:
    mapping: EntityMapping
    entity: Any
    snapshot: Dict[str, Any] = field(default_factory=dict)


class EntityStore:
    """Tracked-object cache and change flusher for one unit of work."""

    def __init__(self, connection: Connection):
        self._connection = connection
        self._tracked: Dict[Tuple[str, Any], _Tracked] = {}

    @property
    def connection(self) -> Connection:
        return self._connection

    def __enter__(self) -> "EntityStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
        self.close()

    def __len__(self) -> int:
        return len(self._tracked)

    # Loading

    def load(self, mapping: EntityMapping[E], key: Any) -> Optional[E]:
        """Return the tracked instance for ``key``, or None when absent."""
        tracked = self._tracked.get((mapping.name, key))
        if tracked is not None:
            return tracked.entity
        row = self._connection.execute(
            select(mapping.table).where(mapping.key_column == key)
        ).first()
        if row is None:
            return None
        logger.debug(f"Loaded {mapping.name} {key!r}")
        return self._track(mapping, mapping.from_row(row))

    def find_one(self, mapping: EntityMapping[E], **criteria) -> Optional[E]:
        """Return the first entity whose columns equal ``criteria``."""
        stmt = self._select(mapping, criteria).limit(1)
        row = self._connection.execute(stmt).first()
        if row is None:
            return None
        return self._materialize(mapping, row)

    def find_all(self, mapping: EntityMapping[E], order_by=None, **criteria) -> List[E]:
        """Return all matching entities, optionally ordered."""
        stmt = self._select(mapping, criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        rows = self._connection.execute(stmt).all()
        return [self._materialize(mapping, row) for row in rows]

    # Mutation

    def tracked_update(self, mapping: EntityMapping[E], key: Any, mutator: Callable[[E], Any]) -> E:
        """Apply ``mutator`` to the tracked instance for ``key``.

        The change is written by the next flush. Raises EntityNotFoundError
        when no row matches.
        """
        entity = self.load(mapping, key)
        if entity is None:
            raise EntityNotFoundError(mapping.name, key)
        mutator(entity)
        return entity

    def insert(self, mapping: EntityMapping[E], entity: E) -> E:
        """Persist a transient entity and start tracking it.

        The generated key is written back onto the caller's instance, which
        is also the instance returned.
        """
        if self.is_tracked(entity):
            raise ValueError(f"{mapping.name} entity is already tracked")
        values = mapping.to_values(entity)
        if values.get(mapping.key) is None:
            values.pop(mapping.key, None)
        result = self._connection.execute(insert(mapping.table).values(**values))
        if getattr(entity, mapping.key) is None:
            setattr(entity, mapping.key, result.inserted_primary_key[0])
        logger.debug(f"Inserted {mapping.name} {getattr(entity, mapping.key)!r}")
        return self._track(mapping, entity)

    def delete_by_key(self, mapping: EntityMapping, key: Any) -> int:
        """Delete the row for ``key`` and stop tracking it.

        Returns the number of rows removed. Raises EntityNotFoundError when
        nothing matched.
        """
        result = self._connection.execute(
            delete(mapping.table).where(mapping.key_column == key)
        )
        self._tracked.pop((mapping.name, key), None)
        if result.rowcount == 0:
            raise EntityNotFoundError(mapping.name, key)
        logger.debug(f"Deleted {mapping.name} {key!r}")
        return result.rowcount

    # Change tracking

    def is_tracked(self, entity: Any) -> bool:
        return any(tracked.entity is entity for tracked in self._tracked.values())

    def dirty_fields(self, entity: Any) -> Dict[str, Any]:
        """Columns of a tracked entity that differ from its snapshot."""
        for tracked in self._tracked.values():
            if tracked.entity is entity:
                return self._diff(tracked)
        raise ValueError("entity is not tracked by this store")

    def flush(self) -> List[FlushedUpdate]:
        """Write every pending change, one UPDATE per changed entity."""
        pending = []
        for (name, key), tracked in self._tracked.items():
            changes = self._diff(tracked)
            if not changes:
                continue
            frozen = [column for column in changes if column not in tracked.mapping.updatable]
            if frozen:
                raise ImmutableFieldError(name, key, frozen)
            pending.append((key, tracked, changes))

        issued = []
        for key, tracked, changes in pending:
            mapping = tracked.mapping
            self._connection.execute(
                update(mapping.table).where(mapping.key_column == key).values(**changes)
            )
            tracked.snapshot = self._snapshot(mapping, tracked.entity)
            flushed = FlushedUpdate(table=mapping.name, key=key, columns=tuple(changes))
            logger.debug(f"Flushed {mapping.name} {key!r}: {', '.join(flushed.columns)}")
            issued.append(flushed)
        return issued

    def commit(self) -> List[FlushedUpdate]:
        """Flush pending changes and commit the transaction."""
        issued = self.flush()
        self._connection.commit()
        return issued

    def rollback(self) -> None:
        """Discard the transaction and forget every tracked instance."""
        self._connection.rollback()
        self._tracked.clear()

    def close(self) -> None:
        self._tracked.clear()

    # Internals

    @staticmethod
    def _select(mapping: EntityMapping, criteria: Dict[str, Any]):
        stmt = select(mapping.table)
        if criteria:
            stmt = stmt.where(*(mapping.table.c[name] == value for name, value in criteria.items()))
        return stmt

    def _track(self, mapping: EntityMapping[E], entity: E) -> E:
        key = getattr(entity, mapping.key)
        self._tracked[(mapping.name, key)] = _Tracked(
            mapping=mapping, entity=entity, snapshot=self._snapshot(mapping, entity)
        )
        return entity

    def _materialize(self, mapping: EntityMapping[E], row) -> E:
        tracked = self._tracked.get((mapping.name, row._mapping[mapping.key]))
        if tracked is not None:
            return tracked.entity
        return self._track(mapping, mapping.from_row(row))

    @staticmethod
    def _snapshot(mapping: EntityMapping, entity: Any) -> Dict[str, Any]:
        return copy.deepcopy(mapping.to_values(entity))

    @staticmethod
    def _diff(tracked: _Tracked) -> Dict[str, Any]:
        current = tracked.mapping.to_values(tracked.entity)
        return {
            name: value
            for name, value in current.items()
            if value != tracked.snapshot.get(name)
        }
