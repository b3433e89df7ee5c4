from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine

from core.services.client_service import ClientService
from core.storage.errors import BackendUnavailable, DuplicateRecord, RecordNotFound
from core.storage.sql_repo import (
    SqlClientRepository,
    SqlSaleRepository,
    create_db_engine,
    init_schema,
    make_session_factory,
)

WED = datetime(2024, 3, 13, 10, 0)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'remote.db'}")
    init_schema(engine)
    return make_session_factory(engine)


def test_client_crud(session_factory, make_client):
    repo = SqlClientRepository(session_factory)
    c = repo.add(make_client(location="Rua A"))
    assert repo.get_by_id(c.id) == c

    with pytest.raises(DuplicateRecord):
        repo.add(c)

    repo.update(c.model_copy(update={"city": "Itu"}))
    assert repo.get_by_id(c.id).city == "Itu"

    assert repo.delete(c.id) is True
    assert repo.delete(c.id) is False
    assert repo.get_by_id(c.id) is None


def test_update_missing(session_factory, make_client):
    with pytest.raises(RecordNotFound):
        SqlClientRepository(session_factory).update(make_client())


def test_weekly_toggle_through_sql(session_factory, make_client):
    repo = SqlClientRepository(session_factory)
    service = ClientService(repo)
    c = service.add_client(make_client())

    service.toggle_weekly_sale(c.id, WED)
    stored = repo.get_by_id(c.id)
    assert len(stored.weekly_sales) == 1
    assert stored.weekly_sales[0].week_start == datetime(2024, 3, 11)
    assert stored.weekly_sales[0].sold is True

    service.toggle_weekly_sale(c.id, WED)
    assert repo.get_by_id(c.id).weekly_sales[0].sold is False


def test_list_newest_first(session_factory, make_client):
    repo = SqlClientRepository(session_factory)
    repo.add(make_client("old", created_at=datetime(2024, 1, 1)))
    repo.add(make_client("new", created_at=datetime(2024, 6, 1)))
    assert [c.name for c in repo.list_all()] == ["new", "old"]


def test_sale_crud(session_factory, make_sale):
    repo = SqlSaleRepository(session_factory)
    s = repo.add(make_sale("99.90"))
    got = repo.get_by_id(s.id)
    assert got.value == Decimal("99.90")
    assert got.client_name == s.client_name
    assert got.date == s.date
    assert [x.id for x in repo.list_all()] == [s.id]


def test_missing_tables_raise_backend_unavailable(tmp_path, make_client):
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    repo = SqlClientRepository(make_session_factory(engine))
    with pytest.raises(BackendUnavailable):
        repo.list_all()
    with pytest.raises(BackendUnavailable):
        repo.add(make_client())
