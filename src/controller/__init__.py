"""Form/edit controller package."""

from src.controller.form_controller import (
    ADD_LABEL,
    UPDATE_LABEL,
    ExpenseFormController,
    ExternalChangeNotice,
    FormMode,
    SubmitOutcome,
)

__all__ = [
    "ADD_LABEL",
    "UPDATE_LABEL",
    "ExpenseFormController",
    "ExternalChangeNotice",
    "FormMode",
    "SubmitOutcome",
]
