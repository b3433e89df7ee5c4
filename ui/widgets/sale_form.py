from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from PySide6.QtCore import QDate
from PySide6.QtWidgets import (
    QComboBox, QDateEdit, QDialog, QDialogButtonBox, QDoubleSpinBox, QFormLayout,
    QLineEdit, QVBoxLayout,
)

from core.models.client import Client
from core.models.sale import Sale


class SaleForm(QDialog):
    def __init__(self, parent=None, clients: Optional[List[Client]] = None, sale: Optional[Sale] = None):
        super().__init__(parent)
        self.setWindowTitle("Editar Venda" if sale else "Nova Venda")
        self.setModal(True)
        self._clients = clients or []

        self.sp_value = QDoubleSpinBox()
        self.sp_value.setDecimals(2)
        self.sp_value.setRange(0.0, 1e9)
        self.sp_value.setPrefix("R$ ")

        self.cb_client = QComboBox()
        self.cb_client.addItem("Selecione um cliente", "")
        for c in self._clients:
            self.cb_client.addItem(f"{c.name} - {c.city}", c.name)
        self.cb_client.currentIndexChanged.connect(self._prefill_city)

        self.ed_city = QLineEdit()
        self.ed_city.setPlaceholderText("Digite a cidade onde foi feita a venda")

        self.de_date = QDateEdit(QDate.currentDate())
        self.de_date.setCalendarPopup(True)
        self.de_date.setDisplayFormat("dd/MM/yyyy")

        form = QFormLayout()
        form.addRow("Valor da Venda *", self.sp_value)
        form.addRow("Cliente *", self.cb_client)
        form.addRow("Cidade da Venda *", self.ed_city)
        form.addRow("Data da Venda *", self.de_date)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

        self._orig_sale = sale
        if sale:
            self._fill_from_sale(sale)

    def _prefill_city(self, _index: int):
        name = self.cb_client.currentData()
        if self.ed_city.text().strip() or not name:
            return
        for c in self._clients:
            if c.name == name:
                self.ed_city.setText(c.city)
                break

    def _fill_from_sale(self, s: Sale):
        self.sp_value.setValue(float(s.value))
        idx = self.cb_client.findData(s.client_name)
        if idx < 0:
            # client supprimé ou renommé : on garde le nom d'origine
            self.cb_client.addItem(s.client_name, s.client_name)
            idx = self.cb_client.count() - 1
        self.cb_client.setCurrentIndex(idx)
        self.ed_city.setText(s.city or "")
        self.de_date.setDate(QDate(s.date.year, s.date.month, s.date.day))

    def get_sale(self) -> Optional[Sale]:
        """Retourne une Sale ou None si valeur nulle / client / ville manquants."""
        value = Decimal(str(round(self.sp_value.value(), 2)))
        client_name = self.cb_client.currentData() or ""
        city = self.ed_city.text().strip()
        if value <= 0 or not client_name or not city:
            return None

        qd = self.de_date.date()
        fields = {
            "value": value,
            "client_name": client_name,
            "city": city,
            "date": datetime(qd.year(), qd.month(), qd.day()),
        }
        if self._orig_sale:
            return Sale.model_validate({**self._orig_sale.model_dump(), **fields})
        return Sale(**fields)
