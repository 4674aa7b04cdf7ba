"""
Customer stores.

The engine never touches records; the store owns them. Every store exposes
get / put plus ``locked(customer_id)``, which callers hold across the whole
read -> compute -> write cycle so two purchases for one customer cannot lose
points. Locks are per key, so different customers never wait on each other.

SqlCustomerStore also runs the locked cycle in one session: the row is read
with SELECT ... FOR UPDATE and the write is committed once, on exit.
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Iterator, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tierpoints.core.errors import CustomerNotFound, DuplicateCustomer
from tierpoints.core.loyalty_rules import Tier
from tierpoints.models.customer import Customer


@dataclass
class CustomerRecord:
    id: Optional[int]
    name: str
    join_date: date
    tier: Tier = Tier.BRONZE
    points: int = 0
    email: Optional[str] = None
    preferred_store: Optional[str] = None
    notifications: bool = True
    last_purchase_date: Optional[datetime] = None
    last_status_change: Optional[datetime] = None


class _KeyLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class CustomerStore(ABC):
    def __init__(self) -> None:
        # entries live only while someone holds or waits on them
        self._locks: dict[int, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def locked(self, customer_id: int) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(customer_id)
            if entry is None:
                entry = self._locks[customer_id] = _KeyLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[customer_id]

    @abstractmethod
    def get(self, customer_id: int) -> Optional[CustomerRecord]:
        ...

    @abstractmethod
    def put(self, customer_id: int, record: CustomerRecord) -> None:
        ...

    @abstractmethod
    def add(self, record: CustomerRecord) -> CustomerRecord:
        """Store a new record; assigns an id when record.id is None."""

    @abstractmethod
    def list(self) -> list[CustomerRecord]:
        ...

    def require(self, customer_id: int) -> CustomerRecord:
        record = self.get(customer_id)
        if record is None:
            raise CustomerNotFound(customer_id)
        return record


class InMemoryCustomerStore(CustomerStore):
    def __init__(self, records: Optional[list[CustomerRecord]] = None) -> None:
        super().__init__()
        self._records: dict[int, CustomerRecord] = {}
        self._next_id = 1
        self._guard = threading.Lock()
        for r in records or []:
            self.add(r)

    def get(self, customer_id: int) -> Optional[CustomerRecord]:
        with self._guard:
            record = self._records.get(customer_id)
            return replace(record) if record else None

    def put(self, customer_id: int, record: CustomerRecord) -> None:
        with self._guard:
            if customer_id not in self._records:
                raise CustomerNotFound(customer_id)
            self._records[customer_id] = replace(record, id=customer_id)

    def add(self, record: CustomerRecord) -> CustomerRecord:
        with self._guard:
            new_id = record.id if record.id is not None else self._next_id
            if new_id in self._records:
                raise DuplicateCustomer(new_id)
            self._next_id = max(self._next_id, new_id + 1)
            stored = replace(record, id=new_id)
            self._records[new_id] = stored
            return replace(stored)

    def list(self) -> list[CustomerRecord]:
        with self._guard:
            return [replace(self._records[k]) for k in sorted(self._records)]


def locking_select(customer_id: int):
    return select(Customer).where(Customer.id == customer_id).with_for_update()


class SqlCustomerStore(CustomerStore):
    def __init__(self, session_factory: Callable[[], Session]) -> None:
        super().__init__()
        self.session_factory = session_factory
        # customer_id -> session of the locked cycle running on this thread
        self._local = threading.local()

    def _sessions(self) -> dict[int, Session]:
        if not hasattr(self._local, "sessions"):
            self._local.sessions = {}
        return self._local.sessions

    @contextmanager
    def locked(self, customer_id: int) -> Iterator[None]:
        with super().locked(customer_id):
            sessions = self._sessions()
            with self.session_factory() as db:
                # row lock for other workers; sqlite ignores FOR UPDATE
                db.scalars(locking_select(customer_id)).first()
                sessions[customer_id] = db
                try:
                    yield
                    db.commit()
                except Exception:
                    db.rollback()
                    raise
                finally:
                    del sessions[customer_id]

    def get(self, customer_id: int) -> Optional[CustomerRecord]:
        db = self._sessions().get(customer_id)
        if db is not None:
            row = db.get(Customer, customer_id)
            return _to_record(row) if row else None

        with self.session_factory() as db:
            row = db.get(Customer, customer_id)
            return _to_record(row) if row else None

    def put(self, customer_id: int, record: CustomerRecord) -> None:
        db = self._sessions().get(customer_id)
        if db is not None:
            # committed when the locked block exits
            _write(db, customer_id, record)
            db.flush()
            return

        with self.session_factory() as db:
            _write(db, customer_id, record)
            db.commit()

    def add(self, record: CustomerRecord) -> CustomerRecord:
        with self.session_factory() as db:
            row = Customer(id=record.id)
            _apply(row, record)
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise DuplicateCustomer(record.id) from None
            db.refresh(row)
            return _to_record(row)

    def list(self) -> list[CustomerRecord]:
        with self.session_factory() as db:
            rows = db.scalars(select(Customer).order_by(Customer.id.asc())).all()
            return [_to_record(r) for r in rows]


def _write(db: Session, customer_id: int, record: CustomerRecord) -> None:
    row = db.get(Customer, customer_id)
    if not row:
        raise CustomerNotFound(customer_id)
    _apply(row, record)


def _apply(row: Customer, record: CustomerRecord) -> None:
    row.name = record.name
    row.tier = Tier.parse(record.tier).value
    row.points = int(record.points)
    row.join_date = record.join_date
    row.email = record.email
    row.preferred_store = record.preferred_store
    row.notifications = bool(record.notifications)
    row.last_purchase_date = record.last_purchase_date
    row.last_status_change = record.last_status_change


def _to_record(row: Customer) -> CustomerRecord:
    return CustomerRecord(
        id=row.id,
        name=row.name,
        tier=Tier.parse(row.tier),
        points=int(row.points or 0),
        join_date=row.join_date,
        email=row.email,
        preferred_store=row.preferred_store,
        notifications=bool(row.notifications),
        last_purchase_date=row.last_purchase_date,
        last_status_change=row.last_status_change,
    )
