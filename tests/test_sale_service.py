from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from core.models.sale import Sale
from core.services.sale_service import SaleService, filter_sales, sale_totals, sort_sales
from core.storage.errors import RecordNotFound


def test_negative_value_rejected():
    with pytest.raises(ValidationError):
        Sale(value=Decimal("-1"), client_name="X")


def test_sale_for_unknown_client_is_accepted(sale_repo, make_sale):
    # pas d'intégrité référentielle avec les clients
    service = SaleService(sale_repo)
    s = service.add_sale(make_sale(client_name="Cliente Fantasma"))
    assert service.get_by_id(s.id).client_name == "Cliente Fantasma"


def test_crud_roundtrip_keeps_decimal(sale_repo, make_sale):
    service = SaleService(sale_repo)
    s = service.add_sale(make_sale("1234.56"))
    assert service.get_by_id(s.id).value == Decimal("1234.56")

    service.update_sale(s.model_copy(update={"value": Decimal("10.00")}))
    assert service.get_by_id(s.id).value == Decimal("10.00")

    assert service.delete_sale(s.id) is True
    assert service.list_sales() == []


def test_update_missing_sale(sale_repo, make_sale):
    with pytest.raises(RecordNotFound):
        SaleService(sale_repo).update_sale(make_sale())


@pytest.fixture
def sales(make_sale):
    return [
        make_sale("50", client_name="Ana Agro", date=datetime(2024, 3, 13, 9)),
        make_sale("300", client_name="Dora Mercado", date=datetime(2024, 3, 12, 18)),
        make_sale("120.50", client_name="ana agro", date=datetime(2024, 3, 13, 17)),
    ]


def test_filter_by_date(sales):
    out = filter_sales(sales, on_date=date(2024, 3, 13))
    assert [s.value for s in out] == [Decimal("50"), Decimal("120.50")]
    assert filter_sales(sales, on_date=datetime(2024, 3, 12, 23)) == [sales[1]]


def test_filter_by_client_substring(sales):
    assert len(filter_sales(sales, client="AGRO")) == 2
    assert filter_sales(sales, client="mercado", on_date=date(2024, 3, 13)) == []


def test_sort_by_value_and_date(sales):
    assert [s.value for s in sort_sales(sales, "value", "asc")] == [Decimal("50"), Decimal("120.50"), Decimal("300")]
    assert [s.value for s in sort_sales(sales, "value", "desc")][0] == Decimal("300")
    assert [s.date.day for s in sort_sales(sales, "date", "asc")] == [12, 13, 13]
    assert sort_sales(sales)[0] is sales[2]


def test_sort_rejects_unknown(sales):
    with pytest.raises(ValueError):
        sort_sales(sales, "city")
    with pytest.raises(ValueError):
        sort_sales(sales, "value", "up")


def test_totals(sales):
    total, avg = sale_totals(sales)
    assert total == Decimal("470.50")
    assert avg.quantize(Decimal("0.01")) == Decimal("156.83")
    assert sale_totals([]) == (Decimal("0"), Decimal("0"))


def test_value_rounded_to_cents(sale_repo, make_sale):
    assert Sale(value=Decimal("10.005"), client_name="X").value == Decimal("10.01")
    assert Sale(value="3", client_name="X").value == Decimal("3.00")

    s = SaleService(sale_repo).add_sale(make_sale("10.004"))
    assert sale_repo.get_by_id(s.id).value == Decimal("10.00")
