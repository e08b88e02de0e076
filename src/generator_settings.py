import logging
import threading
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Literal

logger = logging.getLogger(__name__)


class Delimiters(BaseModel):
    """The separator characters used when rendering the interchange."""
    model_config = ConfigDict(frozen=True)

    element: str = "*"
    component: str = ":"
    segment: str = "~"
    line_ending: str = Field("", description="Written after each segment terminator, e.g. '\\n' for readability.")

    @field_validator("element", "component", "segment")
    @classmethod
    def _single_non_alphanumeric(cls, value: str) -> str:
        if len(value) != 1 or value.isalnum():
            raise ValueError(f"Separator must be a single non-alphanumeric character, got '{value}'.")
        return value

    @field_validator("line_ending")
    @classmethod
    def _whitespace_only(cls, value: str) -> str:
        if value.strip():
            raise ValueError("Line ending may only contain whitespace.")
        return value

    @model_validator(mode="after")
    def _distinct(self) -> "Delimiters":
        if len({self.element, self.component, self.segment}) != 3:
            raise ValueError("Element, component and segment separators must be distinct.")
        return self

    def active(self) -> tuple:
        return (self.element, self.component, self.segment)


class GeneratorSettings(BaseModel):
    """Envelope identifiers and rendering options. Defaults reproduce the standard 835 output."""
    model_config = ConfigDict(frozen=True)

    delimiters: Delimiters = Field(default_factory=Delimiters)
    sender_id_qualifier: str = "ZZ"
    receiver_id_qualifier: str = "ZZ"
    repetition_separator: str = "^"
    interchange_version: str = "00501"
    acknowledgment_requested: Literal["0", "1"] = "0"
    usage_indicator: Literal["P", "T"] = "P"
    responsible_agency_code: str = "X"
    group_version: str = "005010X221A1"
    reject_delimiter_collisions: bool = False

    @model_validator(mode="after")
    def _repetition_separator_not_active(self) -> "GeneratorSettings":
        if self.repetition_separator in self.delimiters.active():
            raise ValueError(f"Repetition separator '{self.repetition_separator}' collides with an active delimiter.")
        return self


class ControlNumbers(BaseModel):
    """Base control numbers for one interchange (ISA13, GS06, ST02)."""
    model_config = ConfigDict(frozen=True)

    interchange: int = Field(1, ge=1, le=999999999)
    group: int = Field(1, ge=1, le=999999999)
    transaction: int = Field(1, ge=1, le=9999)


class SequentialControlNumberSource:
    """
    Hands out monotonically increasing control numbers, one set per call.
    Each instance owns its own counters; share an instance across threads
    only when all callers should draw from the same sequence.
    """

    def __init__(self, start: int = 1):
        self._next = start
        self._lock = threading.Lock()

    def next_control_numbers(self) -> ControlNumbers:
        with self._lock:
            value = self._next
            self._next += 1
        # ST02 is limited to four digits; wrap rather than overflow.
        transaction = value % 10000 or 1
        logger.debug(f"Issued control numbers: interchange={value}, group={value}, transaction={transaction}")
        return ControlNumbers(interchange=value, group=value, transaction=transaction)
