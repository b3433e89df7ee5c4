"""
Dépôts SQLAlchemy pour le backend relationnel distant.
Toute SQLAlchemyError est annulée (rollback) puis remontée en BackendUnavailable
pour que la bascule vers le stockage local puisse prendre le relais.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.models.client import Client
from core.models.sale import Sale
from core.storage.base import M, Repository
from core.storage.errors import BackendUnavailable, DuplicateRecord, RecordNotFound
from core.storage.tables import Base, ClientRow, SaleRow

R = TypeVar("R", bound=Base)


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    kwargs: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if database_url.startswith("postgresql"):
        kwargs.update(pool_recycle=1800, pool_size=5, max_overflow=10)
    return create_engine(database_url, **kwargs)


def init_schema(engine: Engine) -> None:
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise BackendUnavailable(f"cannot initialise schema: {e}") from e


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


class _SqlRepository(Repository[M], Generic[M, R]):
    row_cls: Type[R]

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @abstractmethod
    def _to_row(self, item: M) -> R:
        ...

    @abstractmethod
    def _to_model(self, row: R) -> M:
        ...

    def _copy_into(self, row: R, item: M) -> None:
        fresh = self._to_row(item)
        for col in self.row_cls.__table__.columns.keys():
            if col != "id":
                setattr(row, col, getattr(fresh, col))

    # ---------------- CRUD ---------------- #

    def list_all(self) -> List[M]:
        stmt = select(self.row_cls).order_by(self.row_cls.created_at.desc())
        with self._session_factory() as session:
            try:
                rows = session.scalars(stmt).all()
            except SQLAlchemyError as e:
                raise BackendUnavailable(str(e)) from e
            return [self._to_model(r) for r in rows]

    def get_by_id(self, obj_id: str) -> Optional[M]:
        with self._session_factory() as session:
            try:
                row = session.get(self.row_cls, str(obj_id))
            except SQLAlchemyError as e:
                raise BackendUnavailable(str(e)) from e
            return self._to_model(row) if row is not None else None

    def add(self, item: M) -> M:
        with self._session_factory() as session:
            try:
                if session.get(self.row_cls, item.id) is not None:
                    raise DuplicateRecord(self.entity_name, item.id)
                session.add(self._to_row(item))
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise BackendUnavailable(str(e)) from e
        return item

    def update(self, item: M) -> M:
        with self._session_factory() as session:
            try:
                row = session.get(self.row_cls, item.id)
                if row is None:
                    raise RecordNotFound(self.entity_name, item.id)
                self._copy_into(row, item)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise BackendUnavailable(str(e)) from e
        return item

    def delete(self, obj_id: str) -> bool:
        with self._session_factory() as session:
            try:
                row = session.get(self.row_cls, str(obj_id))
                if row is None:
                    return False
                session.delete(row)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise BackendUnavailable(str(e)) from e
        return True


class SqlClientRepository(_SqlRepository[Client, ClientRow]):
    entity_name = "client"
    row_cls = ClientRow

    def _to_row(self, item: Client) -> ClientRow:
        payload = item.model_dump(mode="json", include={"weekly_sales"})
        return ClientRow(
            id=item.id,
            name=item.name,
            phone=item.phone,
            business_type=item.business_type,
            city=item.city,
            location=item.location,
            importance_level=item.importance_level,
            weekly_sales=payload["weekly_sales"],
            created_at=item.created_at,
        )

    def _to_model(self, row: ClientRow) -> Client:
        return Client.model_validate({
            "id": row.id,
            "name": row.name,
            "phone": row.phone,
            "business_type": row.business_type,
            "city": row.city,
            "location": row.location,
            "importance_level": row.importance_level,
            "weekly_sales": row.weekly_sales or [],
            "created_at": row.created_at,
        })


class SqlSaleRepository(_SqlRepository[Sale, SaleRow]):
    entity_name = "sale"
    row_cls = SaleRow

    def _to_row(self, item: Sale) -> SaleRow:
        return SaleRow(
            id=item.id,
            value=item.value,
            client_name=item.client_name,
            city=item.city,
            date=item.date,
            created_at=item.created_at,
        )

    def _to_model(self, row: SaleRow) -> Sale:
        return Sale(
            id=row.id,
            value=row.value,
            client_name=row.client_name,
            city=row.city,
            date=row.date,
            created_at=row.created_at,
        )
