from datetime import datetime

import pytest
from pydantic import ValidationError

from core.models.client import Client
from core.services.client_service import ClientService, filter_clients, maps_url, whatsapp_url
from core.services.sale_service import SaleService
from core.storage.errors import RecordNotFound

WED = datetime(2024, 3, 13, 10, 0)


@pytest.fixture
def service(client_repo):
    return ClientService(client_repo)


def test_add_and_list(service, make_client):
    c = service.add_client(make_client())
    assert [x.id for x in service.list_clients()] == [c.id]
    assert service.get_by_id(c.id) == c


def test_client_defaults(make_client):
    c = make_client()
    assert c.business_type == "agropecuaria"
    assert c.importance_level == "medium"
    assert c.location == ""
    assert c.weekly_sales == []


def test_client_name_required():
    with pytest.raises(ValidationError):
        Client(name="   ")


def test_client_rejects_unknown_business_type():
    with pytest.raises(ValidationError):
        Client(name="X", business_type="padaria")


def test_toggle_persists(service, client_repo, make_client):
    c = service.add_client(make_client())
    updated = service.toggle_weekly_sale(c.id, WED)

    stored = client_repo.get_by_id(c.id)
    assert stored == updated
    assert stored.weekly_sales[0].sold is True
    assert stored.weekly_sales[0].week_start == datetime(2024, 3, 11)

    service.toggle_weekly_sale(c.id, WED)
    again = client_repo.get_by_id(c.id)
    assert len(again.weekly_sales) == 1
    assert again.weekly_sales[0].sold is False
    assert again.weekly_sales[0].id == stored.weekly_sales[0].id


def test_toggle_unknown_client(service):
    with pytest.raises(RecordNotFound):
        service.toggle_weekly_sale("nope", WED)


def test_update_importance(service, make_client):
    c = service.add_client(make_client(importance_level="low"))
    updated = service.update_importance(c.id, "high")
    assert updated.importance_level == "high"
    assert service.get_by_id(c.id).importance_level == "high"


def test_update_importance_invalid_level(service, make_client):
    c = service.add_client(make_client())
    with pytest.raises(ValidationError):
        service.update_importance(c.id, "urgent")


def test_delete(service, make_client):
    c = service.add_client(make_client())
    assert service.delete_client(c.id) is True
    assert service.delete_client(c.id) is False
    assert service.list_clients() == []


def test_delete_client_keeps_sales(service, sale_repo, make_client, make_sale):
    sales = SaleService(sale_repo)
    c = service.add_client(make_client(name="Mercado Bom"))
    s = sales.add_sale(make_sale(client_name="Mercado Bom"))

    service.delete_client(c.id)
    assert sales.get_by_id(s.id).client_name == "Mercado Bom"


def test_rename_client_does_not_rename_sales(service, sale_repo, make_client, make_sale):
    sales = SaleService(sale_repo)
    c = service.add_client(make_client(name="Mercado Bom"))
    sales.add_sale(make_sale(client_name="Mercado Bom"))

    service.update_client(c.model_copy(update={"name": "Mercado Ótimo"}))
    assert [s.client_name for s in sales.list_sales()] == ["Mercado Bom"]


# --------------------------------------------------------------------
# FILTRES / TRI
# --------------------------------------------------------------------
@pytest.fixture
def clients(make_client):
    return [
        make_client("bruno pet", city="Sorocaba", business_type="petshop", importance_level="low",
                    created_at=datetime(2024, 1, 1)),
        make_client("Ana Agro", city="Campinas", importance_level="high",
                    created_at=datetime(2024, 2, 1)),
        make_client("Carlos Fazenda", city="Itu", business_type="fazenda", importance_level="medium",
                    created_at=datetime(2024, 3, 1)),
        make_client("Dora Mercado", city="campinas", business_type="mercado", importance_level="high",
                    created_at=datetime(2023, 12, 1)),
    ]


def test_default_sort_is_importance_stable(clients):
    names = [c.name for c in filter_clients(clients)]
    assert names == ["Ana Agro", "Dora Mercado", "Carlos Fazenda", "bruno pet"]


def test_sort_by_name_case_insensitive(clients):
    names = [c.name for c in filter_clients(clients, sort_by="name")]
    assert names == ["Ana Agro", "bruno pet", "Carlos Fazenda", "Dora Mercado"]


def test_sort_by_created_newest_first(clients):
    names = [c.name for c in filter_clients(clients, sort_by="created_at")]
    assert names == ["Carlos Fazenda", "Ana Agro", "bruno pet", "Dora Mercado"]


def test_search_on_name_or_city(clients):
    assert {c.name for c in filter_clients(clients, search="CAMPINAS")} == {"Ana Agro", "Dora Mercado"}
    assert [c.name for c in filter_clients(clients, search="pet")] == ["bruno pet"]


def test_filters_combine(clients):
    out = filter_clients(clients, search="campinas", business_type="mercado", importance="high")
    assert [c.name for c in out] == ["Dora Mercado"]
    assert filter_clients(clients, business_type="fazenda", importance="low") == []


def test_unknown_sort(clients):
    with pytest.raises(ValueError):
        filter_clients(clients, sort_by="phone")


def test_whatsapp_url_keeps_digits():
    assert whatsapp_url("(11) 99999-0000") == "https://wa.me/5511999990000"


def test_maps_url_prefers_location():
    assert maps_url("Rua A, 10", "Itu") == "https://www.google.com/maps/search/?api=1&query=Rua%20A%2C%2010"
    assert maps_url("", "São Paulo") == "https://www.google.com/maps/search/?api=1&query=S%C3%A3o%20Paulo"
