"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
one flow every interaction follows:

    user action → controller validates → store mutates → store persists
                → projections re-derived → page renders

plus the inbound path:

    storage change from another session → store reloads → projections re-derived

DESIGN DECISION: There is no intermediate state between a mutation and
its view. Every session method that mutates returns the freshly derived
view, so the page never renders a stale projection.
"""

from pathlib import Path
from typing import Optional

from src.config import Settings, get_settings
from src.controller import (
    ExpenseFormController,
    ExternalChangeNotice,
    SubmitOutcome,
)
from src.diagnostics import DiagnosticsLogger, configure_log_level
from src.models.expense import FormValues
from src.models.view import ExpenseTrackerView
from src.projections import (
    ChartController,
    PieChartRenderer,
    PlotlyPieChartRenderer,
    PresentationProjector,
)
from src.services.storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
)
from src.store import ExpenseStore


class ExpenseTrackerSession:
    """
    Everything one browser session (one "tab") needs.

    Owns the store, the controller and the chart handle; nothing here is
    module-global, so two sessions never share in-memory state, only storage.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        store: ExpenseStore,
        controller: ExpenseFormController,
        projector: PresentationProjector,
        chart: ChartController,
        diagnostics: DiagnosticsLogger,
    ):
        self.storage = storage
        self.store = store
        self.controller = controller
        self.projector = projector
        self.chart = chart
        self.diagnostics = diagnostics
        self._notices: list[ExternalChangeNotice] = []
        self._unsubscribe = storage.subscribe(self._on_storage_change)

        self.store.load()

    def _on_storage_change(self, key: str) -> None:
        notice = self.controller.handle_external_change(key)
        if notice is not None:
            self._notices.append(notice)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def view(self) -> ExpenseTrackerView:
        """Re-derive every projection from the current collection."""
        expenses = self.store.expenses
        totals = self.projector.project_category_totals(expenses)
        chart_state = self.chart.update(totals)
        return self.projector.project_view(
            expenses,
            editing_id=self.controller.editing_id,
            chart=chart_state,
        )

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    def submit(self, values: FormValues) -> tuple[SubmitOutcome, ExpenseTrackerView]:
        outcome = self.controller.submit(values)
        return outcome, self.view()

    def start_edit(self, expense_id: str) -> tuple[Optional[FormValues], ExpenseTrackerView]:
        values = self.controller.start_edit(expense_id)
        return values, self.view()

    def cancel_edit(self) -> ExpenseTrackerView:
        self.controller.cancel_edit()
        return self.view()

    def delete(self, expense_id: str) -> ExpenseTrackerView:
        self.controller.delete(expense_id)
        return self.view()

    # -------------------------------------------------------------------------
    # Cross-session synchronization
    # -------------------------------------------------------------------------

    def sync(self) -> list[ExternalChangeNotice]:
        """
        Deliver pending storage notifications and return what they caused.

        Backends that cannot push changes (the JSON file) are polled here.
        """
        poll = getattr(self.storage, "poll_changes", None)
        if poll is not None:
            poll()
        notices, self._notices = self._notices, []
        return notices

    def close(self) -> None:
        self._unsubscribe()


def create_storage(settings: Optional[Settings] = None) -> KeyValueStorageInterface:
    """Build the configured storage backend."""
    storage_settings = (settings or get_settings()).storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStorage(quota_bytes=storage_settings.quota_bytes)
    return JsonFileKeyValueStorage(
        Path(storage_settings.path).expanduser(),
        quota_bytes=storage_settings.quota_bytes,
    )


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorageInterface] = None,
    chart_renderer: Optional[PieChartRenderer] = None,
    use_chart: Optional[bool] = None,
) -> ExpenseTrackerSession:
    """
    Factory function to create one session's components.

    Args:
        settings: Settings to use (defaults to the cached settings)
        storage: Storage backend; built from settings if None
        chart_renderer: Chart capability; plotly if None and charts are enabled
        use_chart: Override settings.app.chart_enabled

    Returns:
        A loaded ExpenseTrackerSession
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_log_level("DEBUG" if app_settings.debug_mode else app_settings.log_level)
    diagnostics = DiagnosticsLogger(max_recent=app_settings.recent_events_limit)

    if storage is None:
        storage = create_storage(settings)

    chart_enabled = app_settings.chart_enabled if use_chart is None else use_chart
    renderer: Optional[PieChartRenderer] = None
    if chart_enabled:
        renderer = chart_renderer or PlotlyPieChartRenderer()

    projector = PresentationProjector(settings.display)
    store = ExpenseStore(
        storage,
        key=settings.storage.key,
        diagnostics=diagnostics,
    )
    controller = ExpenseFormController(store, diagnostics=diagnostics)
    chart = ChartController(renderer, format_currency=projector.format_currency)

    return ExpenseTrackerSession(
        storage=storage,
        store=store,
        controller=controller,
        projector=projector,
        chart=chart,
        diagnostics=diagnostics,
    )
