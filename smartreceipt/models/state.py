"""
Application State

DESIGN DECISION: There is no global mutable snapshot. The controller
takes an AppState and returns a new one; views hold the current
value and pass it back on the next action. The model is frozen so
an accidental in-place edit fails loudly.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from smartreceipt.models.expense import (
    BudgetSettings,
    Expense,
    ExpenseDraft,
    ValidationResult,
    ViewType,
)


class Notice(BaseModel):
    """A user-visible message (banner/alert)."""
    model_config = ConfigDict(frozen=True)

    level: str = Field(
        ...,
        pattern="^(success|info|warning|error)$"
    )
    text: str


class AppState(BaseModel):
    """
    Everything the views need to render.

    `expenses` and `settings` are the in-memory snapshot, always
    re-read from the record store after a write.
    """
    model_config = ConfigDict(frozen=True)

    view: ViewType = ViewType.DASHBOARD
    expenses: list[Expense] = Field(default_factory=list)
    settings: BudgetSettings = Field(default_factory=BudgetSettings)

    # Add/edit form
    editing: Optional[Expense] = Field(
        default=None,
        description="The expense being edited, None when adding"
    )
    form: ExpenseDraft = Field(default_factory=ExpenseDraft)

    # Feedback from the last action
    notice: Optional[Notice] = None
    validation: Optional[ValidationResult] = None

    @property
    def is_editing(self) -> bool:
        return self.editing is not None

    @property
    def header_label(self) -> str:
        """Label shown in the header badge ('edit' while editing)."""
        if self.view == ViewType.ADD and self.is_editing:
            return "edit"
        return self.view.value
