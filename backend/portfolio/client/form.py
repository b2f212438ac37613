# portfolio/client/form.py
import asyncio
import enum
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

MSG_REQUIRED = "This field is required"
MSG_BAD_EMAIL = "Please enter a valid email"

# Same loose shape the browser form checks: something@something.tld
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

VALID_CUE_SECONDS = 2.0


class FieldVisual(str, enum.Enum):
    NONE = "none"
    ERROR = "error"
    VALID = "valid"


@dataclass
class FieldValidation:
    valid: bool
    error: Optional[str] = None

    @property
    def visual(self) -> FieldVisual:
        return FieldVisual.VALID if self.valid else FieldVisual.ERROR


@dataclass
class FieldIndicator:
    """Inline error text and border cue shown next to one field."""
    visual: FieldVisual = FieldVisual.NONE
    error: Optional[str] = None
    fade_seconds: float = VALID_CUE_SECONDS
    _fade: Optional[asyncio.Task] = field(default=None, repr=False)

    def apply(self, result: FieldValidation) -> None:
        # the previous error message is always replaced, never stacked
        self._cancel_fade()
        self.error = result.error
        self.visual = result.visual
        if result.valid:
            self._schedule_fade()

    def clear(self) -> None:
        self._cancel_fade()
        self.error = None
        self.visual = FieldVisual.NONE

    def _cancel_fade(self) -> None:
        if self._fade is not None and not self._fade.done():
            self._fade.cancel()
        self._fade = None

    def _schedule_fade(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no event loop (sync caller): the cue simply stays until the next update
            return
        self._fade = loop.create_task(self._fade_out())

    async def _fade_out(self) -> None:
        await asyncio.sleep(self.fade_seconds)
        if self.visual is FieldVisual.VALID:
            self.visual = FieldVisual.NONE


@dataclass
class FieldSpec:
    name: str
    value: str = ""
    required: bool = True
    type: str = "text"
    indicator: FieldIndicator = field(default_factory=FieldIndicator)


def validate_field(spec: FieldSpec) -> FieldValidation:
    value = (spec.value or "").strip()
    if spec.required and not value:
        return FieldValidation(False, MSG_REQUIRED)
    if spec.type == "email" and value and not EMAIL_PATTERN.match(value):
        return FieldValidation(False, MSG_BAD_EMAIL)
    return FieldValidation(True)


class ContactForm:
    def __init__(self, fade_seconds: float = VALID_CUE_SECONDS):
        self.fields: List[FieldSpec] = [
            FieldSpec("name"),
            FieldSpec("email", type="email"),
            FieldSpec("message", type="textarea"),
        ]
        for f in self.fields:
            f.indicator.fade_seconds = fade_seconds

    def __getitem__(self, name: str) -> FieldSpec:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def fill(self, values: Mapping[str, str]) -> None:
        for f in self.fields:
            if f.name in values:
                f.value = values[f.name] or ""

    def values(self) -> Dict[str, str]:
        return {f.name: f.value for f in self.fields}

    def validate_all(self) -> bool:
        # every field is checked so each one gets its own indicator
        results = [self.validate(f) for f in self.fields]
        return all(r.valid for r in results)

    def validate(self, spec: FieldSpec) -> FieldValidation:
        result = validate_field(spec)
        spec.indicator.apply(result)
        return result

    def reset(self) -> None:
        for f in self.fields:
            f.value = ""
            f.indicator.clear()
