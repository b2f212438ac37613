import enum
from dataclasses import dataclass
from typing import Optional


class FormPhase(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class InvalidTransition(RuntimeError):
    pass


_ALLOWED = {
    FormPhase.IDLE: {FormPhase.VALIDATING},
    FormPhase.VALIDATING: {FormPhase.SUBMITTING, FormPhase.ERROR},
    FormPhase.SUBMITTING: {FormPhase.SUCCESS, FormPhase.ERROR},
    FormPhase.SUCCESS: {FormPhase.IDLE},
    FormPhase.ERROR: {FormPhase.IDLE},
}


@dataclass
class AppState:
    """UI state owned by a single controller; only the methods below change it."""
    form_phase: FormPhase = FormPhase.IDLE
    current_project: Optional[int] = None
    is_modal_open: bool = False
    is_menu_open: bool = False

    @property
    def submitting(self) -> bool:
        return self.form_phase is FormPhase.SUBMITTING

    @property
    def busy(self) -> bool:
        return self.form_phase in (FormPhase.VALIDATING, FormPhase.SUBMITTING)

    def _move(self, target: FormPhase) -> None:
        if target not in _ALLOWED[self.form_phase]:
            raise InvalidTransition(f"{self.form_phase.value} -> {target.value}")
        self.form_phase = target

    def begin_validation(self) -> None:
        self._move(FormPhase.VALIDATING)

    def begin_submit(self) -> None:
        self._move(FormPhase.SUBMITTING)

    def finish(self, success: bool) -> None:
        self._move(FormPhase.SUCCESS if success else FormPhase.ERROR)

    def reset_form_phase(self) -> None:
        if self.form_phase is not FormPhase.IDLE:
            self._move(FormPhase.IDLE)

    def toggle_menu(self) -> bool:
        self.is_menu_open = not self.is_menu_open
        return self.is_menu_open

    def open_project(self, project_id: int) -> None:
        self.current_project = project_id
        self.is_modal_open = True

    def close_project(self) -> None:
        self.current_project = None
        self.is_modal_open = False
