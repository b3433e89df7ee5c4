from __future__ import annotations
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QTabWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QMessageBox, QTableWidget, QTableWidgetItem,
    QHeaderView, QGroupBox, QDialog, QLineEdit, QComboBox, QDateEdit,
    QCheckBox, QInputDialog,
)
from PySide6.QtCore import QDate, QUrl
from PySide6.QtGui import QDesktopServices
from datetime import date
import logging

from pydantic import ValidationError

from core.config import Settings
from core.models.client import BUSINESS_TYPE_LABELS, IMPORTANCE_LABELS
from core.services.client_service import ClientService, filter_clients, maps_url, whatsapp_url
from core.services.dashboard_service import compute_stats
from core.services.formatting import format_brl, format_date
from core.services.sale_service import SaleService, filter_sales, sale_totals, sort_sales
from core.services.weekly_sale_service import sold_this_week
from core.storage.errors import StorageError
from ui.widgets.client_form import ClientForm
from ui.widgets.sale_form import SaleForm

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, client_service: ClientService, sale_service: SaleService, settings: Settings):
        super().__init__()
        self.setWindowTitle("Dashboard de Vendas")
        self.resize(1280, 800)

        self.client_service = client_service
        self.sale_service = sale_service
        self.settings = settings
        self._sale_order = "desc"

        central = QWidget()
        root = QVBoxLayout(central)
        root.addWidget(self._stats_box())

        self.tabs = QTabWidget()
        self.tabs.addTab(self._clients_tab(), "Clientes")
        self.tabs.addTab(self._sales_tab(), "Vendas")
        root.addWidget(self.tabs, 1)
        self.setCentralWidget(central)

        self._refresh_all()

    def _guarded(self, title: str, fn, *args):
        """Exécute une action service ; erreur de validation/stockage → message."""
        try:
            return fn(*args)
        except (ValidationError, StorageError) as e:
            logger.warning("%s: %s", title, e)
            QMessageBox.warning(self, title, str(e))
            return None

    # ==================== STATISTIQUES ====================
    def _stats_box(self):
        grp = QGroupBox("Estatísticas Gerais")
        lay = QHBoxLayout(grp)
        self.lbl_total_clients = QLabel()
        self.lbl_total_sales = QLabel()
        self.lbl_commission = QLabel()
        self.lbl_week = QLabel()
        for lbl in (self.lbl_total_clients, self.lbl_total_sales, self.lbl_commission, self.lbl_week):
            lay.addWidget(lbl)
        return grp

    def _refresh_stats(self, clients, sales):
        stats = compute_stats(clients, sales, self.settings.commission_rate)
        pct = (self.settings.commission_rate * 100).normalize()
        self.lbl_total_clients.setText(f"Total de Clientes: {stats.total_clients}")
        self.lbl_total_sales.setText(f"Total de Vendas: {stats.total_sales}")
        self.lbl_commission.setText(
            f"Comissão Estimada: {format_brl(stats.commission)} ({pct:f}% sobre o faturamento)"
        )
        self.lbl_week.setText(f"Venderam esta semana: {stats.sold_this_week}")

    def _refresh_all(self):
        clients = self._guarded("Clientes", self.client_service.list_clients) or []
        sales = self._guarded("Vendas", self.sale_service.list_sales) or []
        self._clients_cache = clients
        self._sales_cache = sales
        self._render_clients()
        self._render_sales()
        self._refresh_stats(clients, sales)

    # ==================== CLIENTES ====================
    def _clients_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)

        filters = QHBoxLayout()
        self.ed_client_search = QLineEdit()
        self.ed_client_search.setPlaceholderText("Buscar por nome ou cidade...")
        self.cb_client_business = QComboBox()
        self.cb_client_business.addItem("Todos os Ramos", None)
        for value, label in BUSINESS_TYPE_LABELS.items():
            self.cb_client_business.addItem(label, value)
        self.cb_client_importance = QComboBox()
        self.cb_client_importance.addItem("Todas as Importâncias", None)
        for value, label in IMPORTANCE_LABELS.items():
            self.cb_client_importance.addItem(label, value)
        self.cb_client_sort = QComboBox()
        self.cb_client_sort.addItem("Ordenar por Importância", "importance")
        self.cb_client_sort.addItem("Ordenar por Nome", "name")
        self.cb_client_sort.addItem("Ordenar por Data", "created_at")
        filters.addWidget(self.ed_client_search, 2)
        for cb in (self.cb_client_business, self.cb_client_importance, self.cb_client_sort):
            filters.addWidget(cb)
        root.addLayout(filters)

        bar = QHBoxLayout()
        btn_new = QPushButton("Novo Cliente")
        btn_edit = QPushButton("Editar")
        btn_del = QPushButton("Excluir")
        btn_week = QPushButton("Venda semanal")
        btn_importance = QPushButton("Importância")
        btn_whatsapp = QPushButton("WhatsApp")
        btn_maps = QPushButton("Ver no Maps")
        for b in (btn_new, btn_edit, btn_del, btn_week, btn_importance):
            bar.addWidget(b)
        bar.addStretch(1)
        bar.addWidget(btn_whatsapp); bar.addWidget(btn_maps)
        root.addLayout(bar)

        self.tbl_clients = QTableWidget(0, 8)
        self.tbl_clients.setHorizontalHeaderLabels(
            ["Nome", "Telefone", "Ramo", "Cidade", "Importância", "Esta semana", "Cadastro", "ID"]
        )
        self.tbl_clients.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl_clients.setSelectionBehavior(self.tbl_clients.SelectionBehavior.SelectRows)
        self.tbl_clients.setEditTriggers(self.tbl_clients.EditTrigger.NoEditTriggers)
        root.addWidget(self.tbl_clients, 1)

        self.ed_client_search.textChanged.connect(lambda _t: self._render_clients())
        for cb in (self.cb_client_business, self.cb_client_importance, self.cb_client_sort):
            cb.currentIndexChanged.connect(lambda _i: self._render_clients())
        btn_new.clicked.connect(self._client_new)
        btn_edit.clicked.connect(self._client_edit)
        btn_del.clicked.connect(self._client_delete)
        btn_week.clicked.connect(self._client_toggle_week)
        btn_importance.clicked.connect(self._client_importance)
        btn_whatsapp.clicked.connect(self._client_whatsapp)
        btn_maps.clicked.connect(self._client_maps)
        return w

    def _render_clients(self):
        if not hasattr(self, "_clients_cache"):
            return
        items = filter_clients(
            self._clients_cache,
            search=self.ed_client_search.text(),
            business_type=self.cb_client_business.currentData(),
            importance=self.cb_client_importance.currentData(),
            sort_by=self.cb_client_sort.currentData(),
        )
        self.tbl_clients.setRowCount(0)
        for c in items:
            r = self.tbl_clients.rowCount(); self.tbl_clients.insertRow(r)
            self.tbl_clients.setItem(r, 0, QTableWidgetItem(c.name))
            self.tbl_clients.setItem(r, 1, QTableWidgetItem(c.phone))
            self.tbl_clients.setItem(r, 2, QTableWidgetItem(BUSINESS_TYPE_LABELS[c.business_type]))
            self.tbl_clients.setItem(r, 3, QTableWidgetItem(c.city))
            self.tbl_clients.setItem(r, 4, QTableWidgetItem(IMPORTANCE_LABELS[c.importance_level]))
            self.tbl_clients.setItem(r, 5, QTableWidgetItem("✔ Vendeu" if sold_this_week(c) else "Não"))
            self.tbl_clients.setItem(r, 6, QTableWidgetItem(format_date(c.created_at)))
            self.tbl_clients.setItem(r, 7, QTableWidgetItem(c.id))
        self.tbl_clients.resizeRowsToContents()

    def _selected_client(self):
        row = self.tbl_clients.currentRow()
        if row < 0:
            QMessageBox.information(self, "Clientes", "Selecione um cliente primeiro.")
            return None
        cid = self.tbl_clients.item(row, 7).text()
        return next((c for c in self._clients_cache if c.id == cid), None)

    def _client_new(self):
        dlg = ClientForm(self)
        if dlg.exec() == QDialog.Accepted:
            c = dlg.get_client()
            if not c:
                QMessageBox.warning(self, "Validação", "Nome, telefone e cidade são obrigatórios.")
                return
            self._guarded("Novo Cliente", self.client_service.add_client, c)
            self._refresh_all()

    def _client_edit(self):
        current = self._selected_client()
        if not current:
            return
        dlg = ClientForm(self, client=current)
        if dlg.exec() == QDialog.Accepted:
            c = dlg.get_client()
            if not c:
                QMessageBox.warning(self, "Validação", "Nome, telefone e cidade são obrigatórios.")
                return
            self._guarded("Editar Cliente", self.client_service.update_client, c)
            self._refresh_all()

    def _client_delete(self):
        c = self._selected_client()
        if not c:
            return
        if QMessageBox.question(self, "Excluir", "Tem certeza que deseja excluir este cliente?") == QMessageBox.Yes:
            self._guarded("Excluir Cliente", self.client_service.delete_client, c.id)
            self._refresh_all()

    def _client_toggle_week(self):
        c = self._selected_client()
        if not c:
            return
        self._guarded("Venda semanal", self.client_service.toggle_weekly_sale, c.id)
        self._refresh_all()

    def _client_importance(self):
        c = self._selected_client()
        if not c:
            return
        labels = list(IMPORTANCE_LABELS.values())
        current = labels.index(IMPORTANCE_LABELS[c.importance_level])
        label, ok = QInputDialog.getItem(self, "Importância", c.name, labels, current, False)
        if not ok:
            return
        level = next(k for k, v in IMPORTANCE_LABELS.items() if v == label)
        self._guarded("Importância", self.client_service.update_importance, c.id, level)
        self._refresh_all()

    def _client_whatsapp(self):
        c = self._selected_client()
        if c:
            QDesktopServices.openUrl(QUrl(whatsapp_url(c.phone)))

    def _client_maps(self):
        c = self._selected_client()
        if c:
            QDesktopServices.openUrl(QUrl(maps_url(c.location, c.city)))

    # ==================== VENDAS ====================
    def _sales_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)

        filters = QHBoxLayout()
        self.chk_sale_date = QCheckBox("Filtrar por data")
        self.de_sale_date = QDateEdit(QDate.currentDate())
        self.de_sale_date.setCalendarPopup(True)
        self.de_sale_date.setDisplayFormat("dd/MM/yyyy")
        self.ed_sale_client = QLineEdit()
        self.ed_sale_client.setPlaceholderText("Filtrar por cliente...")
        self.cb_sale_sort = QComboBox()
        self.cb_sale_sort.addItem("Ordenar por Data", "date")
        self.cb_sale_sort.addItem("Ordenar por Valor", "value")
        self.btn_sale_order = QPushButton("↓ Decrescente")
        filters.addWidget(self.chk_sale_date); filters.addWidget(self.de_sale_date)
        filters.addWidget(self.ed_sale_client, 2)
        filters.addWidget(self.cb_sale_sort); filters.addWidget(self.btn_sale_order)
        root.addLayout(filters)

        bar = QHBoxLayout()
        btn_new = QPushButton("Nova Venda")
        btn_edit = QPushButton("Editar")
        btn_del = QPushButton("Excluir")
        for b in (btn_new, btn_edit, btn_del):
            bar.addWidget(b)
        bar.addStretch(1)
        self.lbl_sale_totals = QLabel()
        bar.addWidget(self.lbl_sale_totals)
        root.addLayout(bar)

        self.tbl_sales = QTableWidget(0, 5)
        self.tbl_sales.setHorizontalHeaderLabels(["Data", "Cliente", "Cidade", "Valor", "ID"])
        self.tbl_sales.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl_sales.setSelectionBehavior(self.tbl_sales.SelectionBehavior.SelectRows)
        self.tbl_sales.setEditTriggers(self.tbl_sales.EditTrigger.NoEditTriggers)
        root.addWidget(self.tbl_sales, 1)

        self.chk_sale_date.toggled.connect(lambda _b: self._render_sales())
        self.de_sale_date.dateChanged.connect(lambda _d: self._render_sales())
        self.ed_sale_client.textChanged.connect(lambda _t: self._render_sales())
        self.cb_sale_sort.currentIndexChanged.connect(lambda _i: self._render_sales())
        self.btn_sale_order.clicked.connect(self._toggle_sale_order)
        btn_new.clicked.connect(self._sale_new)
        btn_edit.clicked.connect(self._sale_edit)
        btn_del.clicked.connect(self._sale_delete)
        return w

    def _toggle_sale_order(self):
        self._sale_order = "asc" if self._sale_order == "desc" else "desc"
        self.btn_sale_order.setText("↑ Crescente" if self._sale_order == "asc" else "↓ Decrescente")
        self._render_sales()

    def _render_sales(self):
        if not hasattr(self, "_sales_cache"):
            return
        on_date = None
        if self.chk_sale_date.isChecked():
            qd = self.de_sale_date.date()
            on_date = date(qd.year(), qd.month(), qd.day())
        items = filter_sales(self._sales_cache, on_date=on_date, client=self.ed_sale_client.text())
        items = sort_sales(items, sort_by=self.cb_sale_sort.currentData(), order=self._sale_order)

        self.tbl_sales.setRowCount(0)
        for s in items:
            r = self.tbl_sales.rowCount(); self.tbl_sales.insertRow(r)
            self.tbl_sales.setItem(r, 0, QTableWidgetItem(format_date(s.date)))
            self.tbl_sales.setItem(r, 1, QTableWidgetItem(s.client_name))
            self.tbl_sales.setItem(r, 2, QTableWidgetItem(s.city))
            self.tbl_sales.setItem(r, 3, QTableWidgetItem(format_brl(s.value)))
            self.tbl_sales.setItem(r, 4, QTableWidgetItem(s.id))
        self.tbl_sales.resizeRowsToContents()

        total, average = sale_totals(items)
        self.lbl_sale_totals.setText(
            f"{len(items)} venda(s) | Total: {format_brl(total)} | Média: {format_brl(average)}"
        )

    def _selected_sale(self):
        row = self.tbl_sales.currentRow()
        if row < 0:
            QMessageBox.information(self, "Vendas", "Selecione uma venda primeiro.")
            return None
        sid = self.tbl_sales.item(row, 4).text()
        return next((s for s in self._sales_cache if s.id == sid), None)

    def _sale_new(self):
        dlg = SaleForm(self, clients=self._clients_cache)
        if dlg.exec() == QDialog.Accepted:
            s = dlg.get_sale()
            if not s:
                QMessageBox.warning(self, "Validação", "Valor, cliente e cidade são obrigatórios.")
                return
            self._guarded("Nova Venda", self.sale_service.add_sale, s)
            self._refresh_all()

    def _sale_edit(self):
        current = self._selected_sale()
        if not current:
            return
        dlg = SaleForm(self, clients=self._clients_cache, sale=current)
        if dlg.exec() == QDialog.Accepted:
            s = dlg.get_sale()
            if not s:
                QMessageBox.warning(self, "Validação", "Valor, cliente e cidade são obrigatórios.")
                return
            self._guarded("Editar Venda", self.sale_service.update_sale, s)
            self._refresh_all()

    def _sale_delete(self):
        s = self._selected_sale()
        if not s:
            return
        if QMessageBox.question(self, "Excluir", "Tem certeza que deseja excluir esta venda?") == QMessageBox.Yes:
            self._guarded("Excluir Venda", self.sale_service.delete_sale, s.id)
            self._refresh_all()
