from datetime import datetime
from decimal import Decimal

import pytest

from core.models.client import Client
from core.models.sale import Sale
from core.storage.json_repo import JsonRepository


@pytest.fixture
def client_repo(tmp_path):
    return JsonRepository(tmp_path / "clients.json", Client, entity_name="client")


@pytest.fixture
def sale_repo(tmp_path):
    return JsonRepository(tmp_path / "sales.json", Sale, entity_name="sale")


@pytest.fixture
def make_client():
    def _make(name="Agro Silva", **kw):
        kw.setdefault("phone", "(11) 99999-0000")
        kw.setdefault("city", "Campinas")
        return Client(name=name, **kw)
    return _make


@pytest.fixture
def make_sale():
    def _make(value="100.00", client_name="Agro Silva", **kw):
        kw.setdefault("city", "Campinas")
        kw.setdefault("date", datetime(2024, 3, 13, 10, 0))
        return Sale(value=Decimal(value), client_name=client_name, **kw)
    return _make
