from __future__ import annotations

from datetime import date
from pathlib import Path

from PySide6.QtCore import QDate, QSignalBlocker
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QAbstractItemView,
    QButtonGroup,
    QComboBox,
    QDateEdit,
    QFileDialog,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from ..models.report_models import Metric
from ..services.formatting import fixed_money, format_money, format_order_date, format_percent
from ..viewmodels.report_view_model import ReportViewModel
from ..viewmodels.table_models import ListTableModel, TableColumn


APP_NAME = "Monthly Revenue Calculator"


def _to_qdate(value: date) -> QDate:
    return QDate(value.year, value.month, value.day)


def _to_date(value: QDate) -> date:
    return date(value.year(), value.month(), value.day())


class MainWindow(QMainWindow):
    def __init__(self, view_model: ReportViewModel) -> None:
        super().__init__()
        self._view_model = view_model
        self.setWindowTitle(APP_NAME)
        self.resize(1280, 860)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout()
        central.setLayout(layout)

        title = QLabel(APP_NAME)
        title.setStyleSheet("font-size: 24px; font-weight: bold;")
        layout.addWidget(title)

        self._banner_label = QLabel()
        self._banner_label.setWordWrap(True)
        self._banner_label.setStyleSheet(
            "background-color: #fdecea; color: #b71c1c; border: 1px solid #f5c6cb; padding: 8px;"
        )
        self._banner_label.setVisible(False)
        layout.addWidget(self._banner_label)

        self._build_filters(layout)
        self._build_analytics(layout)
        self._build_summary_table(layout)
        self._build_detail_section(layout)

        self._connect_view_model()
        self._refresh_customer_combo()
        self._on_results_changed()
        self._on_busy_changed(False)
        self._view_model.load_customers()

    # Filters
    def _build_filters(self, layout: QVBoxLayout) -> None:
        filters_box = QGroupBox("Filters")
        filter_layout = QHBoxLayout()
        filters_box.setLayout(filter_layout)
        layout.addWidget(filters_box)

        state = self._view_model.filter_state

        filter_layout.addWidget(QLabel("Date range"))
        self._start_date_input = QDateEdit()
        self._start_date_input.setCalendarPopup(True)
        self._start_date_input.setDisplayFormat("yyyy-MM-dd")
        self._start_date_input.setDate(_to_qdate(state.start))
        self._start_date_input.dateChanged.connect(
            lambda value: self._view_model.set_start(_to_date(value))
        )
        filter_layout.addWidget(self._start_date_input)

        self._end_date_input = QDateEdit()
        self._end_date_input.setCalendarPopup(True)
        self._end_date_input.setDisplayFormat("yyyy-MM-dd")
        self._end_date_input.setDate(_to_qdate(state.end))
        self._end_date_input.dateChanged.connect(lambda value: self._view_model.set_end(_to_date(value)))
        filter_layout.addWidget(self._end_date_input)

        filter_layout.addSpacing(16)
        filter_layout.addWidget(QLabel("Metric"))
        self._metric_group = QButtonGroup(self)
        for metric in Metric:
            button = QRadioButton(metric.label)
            button.setChecked(metric is state.metric)
            button.toggled.connect(lambda checked, selected=metric: self._on_metric_toggled(selected, checked))
            self._metric_group.addButton(button)
            filter_layout.addWidget(button)

        filter_layout.addSpacing(16)
        filter_layout.addWidget(QLabel("Customer"))
        self._customer_combo = QComboBox()
        self._customer_combo.setMinimumWidth(300)
        self._customer_combo.currentIndexChanged.connect(self._on_customer_selected)
        filter_layout.addWidget(self._customer_combo)

        self._generate_button = QPushButton("Generate Report")
        self._generate_button.clicked.connect(self._view_model.generate_report)
        filter_layout.addWidget(self._generate_button)
        filter_layout.addStretch(1)

        progress_row = QHBoxLayout()
        self._progress_bar = QProgressBar()
        self._progress_bar.setRange(0, 100)
        self._progress_label = QLabel("Generating report...")
        self._progress_label.setStyleSheet("color: #6d7175;")
        progress_row.addWidget(self._progress_bar, 1)
        progress_row.addWidget(self._progress_label)
        layout.addLayout(progress_row)

    def _on_metric_toggled(self, metric: Metric, checked: bool) -> None:
        if checked:
            self._view_model.set_metric(metric)

    def _refresh_customer_combo(self) -> None:
        selected = self._view_model.filter_state.customer_id or ""
        blocker = QSignalBlocker(self._customer_combo)
        self._customer_combo.clear()
        for option in self._view_model.customer_options():
            self._customer_combo.addItem(option.label, option.value)
        index = self._customer_combo.findData(selected)
        self._customer_combo.setCurrentIndex(index if index >= 0 else 0)
        del blocker

    def _on_customer_selected(self, index: int) -> None:
        value = self._customer_combo.itemData(index)
        self._view_model.set_customer_id(value or None)

    # Analytics
    def _build_analytics(self, layout: QVBoxLayout) -> None:
        self._analytics_box = QGroupBox("Analytics Summary")
        grid = QGridLayout()
        self._analytics_box.setLayout(grid)
        self._analytics_labels = {}
        for column, (key, title) in enumerate(
            (
                ("revenue", "Total Revenue"),
                ("orders", "Total Orders"),
                ("customers", "Unique Customers"),
                ("margin", "Avg Profit Margin"),
            )
        ):
            heading = QLabel(title)
            heading.setStyleSheet("font-weight: bold;")
            value = QLabel("-")
            value.setStyleSheet("font-size: 20px;")
            grid.addWidget(heading, 0, column)
            grid.addWidget(value, 1, column)
            self._analytics_labels[key] = value
        layout.addWidget(self._analytics_box)

    # Summary
    def _build_summary_table(self, layout: QVBoxLayout) -> None:
        self._summary_box = QGroupBox("Monthly Summary")
        box_layout = QVBoxLayout()
        self._summary_box.setLayout(box_layout)

        vm = self._view_model
        self._summary_model = ListTableModel(
            (
                TableColumn("Customer", lambda row: vm.summary_customer_label(row)),
                TableColumn("Month", lambda row: row.month),
                TableColumn("Orders", lambda row: row.orders, numeric=True),
                TableColumn("Amount", lambda row: f"{fixed_money(row.amount)}", lambda row: row.amount, numeric=True),
                TableColumn("Order Numbers", lambda row: row.order_numbers),
            )
        )
        self._summary_table = QTableView()
        self._configure_table(self._summary_table, self._summary_model)
        box_layout.addWidget(self._summary_table)
        layout.addWidget(self._summary_box)

    # Detail
    def _build_detail_section(self, layout: QVBoxLayout) -> None:
        self._detail_box = QGroupBox()
        box_layout = QVBoxLayout()
        self._detail_box.setLayout(box_layout)

        header_row = QHBoxLayout()
        header = QLabel("Order Details")
        header.setStyleSheet("font-size: 16px; font-weight: bold;")
        header_row.addWidget(header)
        header_row.addStretch(1)
        self._order_count_badge = QLabel()
        self._order_count_badge.setStyleSheet(
            "background-color: #e3f1df; color: #2e7d32; border-radius: 8px; padding: 2px 8px;"
        )
        header_row.addWidget(self._order_count_badge)
        box_layout.addLayout(header_row)

        vm = self._view_model
        self._detail_model = ListTableModel(
            (
                TableColumn("Order #", lambda row: row.display_order_number),
                TableColumn("Date", lambda row: format_order_date(row.order_date), lambda row: row.order_date),
                TableColumn("Customer", lambda row: vm.detail_customer_label(row)),
                TableColumn("Email", lambda row: row.customer_email or "-"),
                TableColumn("Line Items", lambda row: format_money(row.line_sum), lambda row: row.line_sum, True),
                TableColumn(
                    "Additional",
                    lambda row: format_money(row.additional_charges),
                    lambda row: row.additional_charges,
                    True,
                ),
                TableColumn(
                    "Billing",
                    lambda row: format_money(row.billing_amount),
                    lambda row: row.billing_amount,
                    True,
                ),
                TableColumn(
                    "Actual",
                    lambda row: format_money(row.actual_spend),
                    lambda row: row.actual_spend,
                    True,
                ),
                TableColumn(
                    "Profit %",
                    lambda row: format_percent(row.profit_margin),
                    lambda row: row.profit_margin,
                    True,
                ),
            )
        )
        self._detail_table = QTableView()
        self._configure_table(self._detail_table, self._detail_model)
        self._detail_table.setSortingEnabled(True)
        box_layout.addWidget(self._detail_table)

        totals_box = QGroupBox("Total Summary")
        totals_grid = QGridLayout()
        totals_box.setLayout(totals_grid)
        self._totals_labels = {}
        for column, (key, title) in enumerate(
            (
                ("orders", "Total Orders"),
                ("line_sum", "Total Line Items"),
                ("additional", "Total Additional Charges"),
                ("billing", "Total Billing Amount"),
                ("actual", "Total Actual Spend"),
                ("margin", "Average Profit Margin"),
            )
        ):
            heading = QLabel(title)
            heading.setStyleSheet("font-weight: bold;")
            value = QLabel("-")
            value.setStyleSheet("font-size: 18px;")
            totals_grid.addWidget(heading, 0, column)
            totals_grid.addWidget(value, 1, column)
            self._totals_labels[key] = value
        box_layout.addWidget(totals_box)

        export_row = QHBoxLayout()
        self._export_summary_button = QPushButton("Export Summary CSV")
        self._export_summary_button.clicked.connect(self._handle_export_summary)
        export_row.addWidget(self._export_summary_button)
        self._export_detail_button = QPushButton("Export Per-Order CSV")
        self._export_detail_button.clicked.connect(self._handle_export_detail)
        export_row.addWidget(self._export_detail_button)
        self._export_status_label = QLabel()
        export_row.addWidget(self._export_status_label, 1)
        box_layout.addLayout(export_row)

        layout.addWidget(self._detail_box, 1)

    def _configure_table(self, table: QTableView, model: ListTableModel) -> None:
        table.setModel(model)
        table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        table.setAlternatingRowColors(True)
        table.verticalHeader().setVisible(False)
        table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.ResizeToContents)
        table.horizontalHeader().setStretchLastSection(True)

    # View-model bindings
    def _connect_view_model(self) -> None:
        vm = self._view_model
        vm.customersChanged.connect(self._refresh_customer_combo)
        vm.customersLoadingChanged.connect(lambda loading: self._customer_combo.setEnabled(not loading))
        vm.resultsChanged.connect(self._on_results_changed)
        vm.busyChanged.connect(self._on_busy_changed)
        vm.progressChanged.connect(self._progress_bar.setValue)
        vm.bannerChanged.connect(self._on_banner_changed)

    def _on_banner_changed(self, message: str) -> None:
        self._banner_label.setText(message)
        self._banner_label.setVisible(bool(message))

    def _on_busy_changed(self, busy: bool) -> None:
        self._generate_button.setEnabled(not busy)
        self._generate_button.setText("Generating..." if busy else "Generate Report")
        self._progress_bar.setVisible(busy)
        self._progress_label.setVisible(busy)

    def _on_results_changed(self) -> None:
        vm = self._view_model
        self._render_analytics()
        self._summary_model.update_rows(vm.summary)
        self._summary_box.setVisible(bool(vm.summary))
        self._detail_model.update_rows(vm.detail)
        self._detail_box.setVisible(vm.has_detail)
        self._order_count_badge.setText(f"{len(vm.detail)} orders")
        self._export_summary_button.setEnabled(vm.has_detail)
        self._export_detail_button.setEnabled(vm.has_detail)
        self._render_totals()

    def _render_analytics(self) -> None:
        analytics = self._view_model.analytics
        self._analytics_box.setVisible(analytics is not None)
        if analytics is None:
            return
        self._analytics_labels["revenue"].setText(f"${analytics.total_revenue:,}")
        self._analytics_labels["orders"].setText(f"{analytics.total_orders:,}")
        self._analytics_labels["customers"].setText(str(analytics.unique_customers))
        self._analytics_labels["margin"].setText(f"{analytics.avg_profit_margin}%")

    def _render_totals(self) -> None:
        totals = self._view_model.totals
        self._totals_labels["orders"].setText(str(totals.order_count))
        self._totals_labels["line_sum"].setText(format_money(totals.total_line_sum))
        self._totals_labels["additional"].setText(format_money(totals.total_additional_charges))
        self._totals_labels["billing"].setText(format_money(totals.total_billing_amount))
        self._totals_labels["actual"].setText(format_money(totals.total_actual_spend))
        self._totals_labels["margin"].setText(format_percent(totals.avg_profit_margin))

    # Export
    def _handle_export_summary(self) -> None:
        self._export(self._view_model.summary_export_name(), self._view_model.export_summary, "Export Summary CSV")

    def _handle_export_detail(self) -> None:
        self._export(self._view_model.detail_export_name(), self._view_model.export_detail, "Export Per-Order CSV")

    def _export(self, default_name: str, exporter, title: str) -> None:
        if not self._view_model.has_detail:
            self._show_export_status("Run a report before exporting.", error=True)
            return

        suggested_path = str(Path.home() / default_name)
        filename, _ = QFileDialog.getSaveFileName(self, title, suggested_path, "CSV Files (*.csv)")
        if not filename:
            return

        try:
            exported_path = exporter(filename)
        except OSError as exc:
            self._show_export_status(f"Export failed: {exc}", error=True)
            return

        self._show_export_status(f"Exported to {exported_path}")

    def _show_export_status(self, message: str, *, error: bool = False) -> None:
        self._export_status_label.setStyleSheet("color: #d32f2f;" if error else "color: #2e7d32;")
        self._export_status_label.setText(message)

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        self._view_model.close()
        super().closeEvent(event)
