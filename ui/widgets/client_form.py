from __future__ import annotations
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QComboBox, QDialogButtonBox
)
from PySide6.QtCore import Qt
from typing import Optional

from core.models.client import BUSINESS_TYPE_LABELS, IMPORTANCE_LABELS, Client


class ClientForm(QDialog):
    def __init__(self, parent=None, client: Optional[Client] = None):
        super().__init__(parent)
        self.setWindowTitle("Editar Cliente" if client else "Novo Cliente")
        self.setModal(True)

        self.ed_name = QLineEdit()
        self.ed_name.setPlaceholderText("Digite o nome do cliente")
        self.ed_phone = QLineEdit()
        self.ed_phone.setPlaceholderText("(11) 99999-9999")
        self.cb_business = QComboBox()
        for value, label in BUSINESS_TYPE_LABELS.items():
            self.cb_business.addItem(label, value)
        self.ed_city = QLineEdit()
        self.ed_city.setPlaceholderText("Digite a cidade")
        self.ed_location = QLineEdit()
        self.ed_location.setPlaceholderText("Endereço ou link do Maps")
        self.cb_importance = QComboBox()
        for value, label in IMPORTANCE_LABELS.items():
            self.cb_importance.addItem(label, value)
        self.cb_importance.setCurrentIndex(self.cb_importance.findData("medium"))

        form = QFormLayout()
        form.addRow("Nome *", self.ed_name)
        form.addRow("Telefone *", self.ed_phone)
        form.addRow("Ramo", self.cb_business)
        form.addRow("Cidade *", self.ed_city)
        form.addRow("Localização", self.ed_location)
        form.addRow("Importância", self.cb_importance)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

        self._orig_client = client
        if client:
            self._fill_from_client(client)

    def _fill_from_client(self, c: Client):
        self.ed_name.setText(c.name or "")
        self.ed_phone.setText(c.phone or "")
        self.cb_business.setCurrentIndex(self.cb_business.findData(c.business_type))
        self.ed_city.setText(c.city or "")
        self.ed_location.setText(c.location or "")
        self.cb_importance.setCurrentIndex(self.cb_importance.findData(c.importance_level))

    def get_client(self) -> Optional[Client]:
        """Retourne un Client (nouveau ou mis à jour) ou None si un champ obligatoire manque."""
        for ed in (self.ed_name, self.ed_phone, self.ed_city):
            if not ed.text().strip():
                ed.setFocus(Qt.FocusReason.ActiveWindowFocusReason)
                return None

        fields = {
            "name": self.ed_name.text().strip(),
            "phone": self.ed_phone.text().strip(),
            "business_type": self.cb_business.currentData(),
            "city": self.ed_city.text().strip(),
            "location": self.ed_location.text().strip(),
            "importance_level": self.cb_importance.currentData(),
        }

        if self._orig_client:
            # id, created_at et ventes hebdo conservés
            return Client.model_validate({**self._orig_client.model_dump(), **fields})

        return Client(**fields)
