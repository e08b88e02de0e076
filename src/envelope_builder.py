import logging
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from x12_segment import Segment, segment
from x12_defs import (
    FUNCTIONAL_IDENTIFIER_CODE, TRANSACTION_SET_ID,
    EnvelopeStateError, FieldLengthError, MissingFieldError,
)
from generator_settings import GeneratorSettings, ControlNumbers

logger = logging.getLogger(__name__)

ISA_ID_WIDTH = 15
ISA_AUTH_WIDTH = 10


class EnvelopeState(str, Enum):
    IDLE = "idle"
    INTERCHANGE = "interchange"
    GROUP = "group"
    TRANSACTION = "transaction"
    CLOSED = "closed"


def _pad_fixed(value: Optional[str], width: int, field: str, segment_id: str) -> str:
    if value is None or not value.strip():
        raise MissingFieldError("Envelope identifier is missing or empty.", field=field, segment_id=segment_id)
    if len(value) > width:
        raise FieldLengthError(f"Value '{value}' exceeds the fixed width of {width}.", field=field, segment_id=segment_id)
    return value.ljust(width)


class EnvelopeBuilder:
    """
    Wraps transaction bodies in the ISA/GS/ST envelope and closes them with SE/GE/IEA.

    The builder owns every count and control number that appears in a trailer:
    callers only open and close levels and hand over body segments. Levels must
    be opened and closed in strict nesting order, otherwise EnvelopeStateError.
    """

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        control_numbers: Optional[ControlNumbers] = None,
        timestamp: Optional[datetime] = None,
    ):
        self.settings = settings or GeneratorSettings()
        self.control_numbers = control_numbers or ControlNumbers()
        self.timestamp = timestamp or datetime.now()
        self.state = EnvelopeState.IDLE
        self._segments: List[Segment] = []

        self._interchange_control: Optional[int] = None
        self._group_control: Optional[int] = None
        self._transaction_control: Optional[int] = None
        self._groups_in_interchange = 0
        self._transactions_in_group = 0
        self._transactions_in_interchange = 0
        self._segments_in_transaction = 0

    def _expect(self, expected: EnvelopeState, action: str) -> None:
        if self.state != expected:
            raise EnvelopeStateError(
                f"Cannot {action} while envelope is in state '{self.state.value}' (expected '{expected.value}')."
            )

    def open_interchange(self, sender_id: str, receiver_id: str) -> None:
        self._expect(EnvelopeState.IDLE, "open interchange")
        s = self.settings
        self._interchange_control = self.control_numbers.interchange
        isa = segment(
            "ISA",
            "00",                                   # ISA01: authorization information qualifier
            " " * ISA_AUTH_WIDTH,
            "00",                                   # ISA03: security information qualifier
            " " * ISA_AUTH_WIDTH,
            s.sender_id_qualifier,
            _pad_fixed(sender_id, ISA_ID_WIDTH, "ISA06", "ISA"),
            s.receiver_id_qualifier,
            _pad_fixed(receiver_id, ISA_ID_WIDTH, "ISA08", "ISA"),
            self.timestamp.strftime("%y%m%d"),
            self.timestamp.strftime("%H%M"),
            s.repetition_separator,
            s.interchange_version,
            f"{self._interchange_control:09d}",
            s.acknowledgment_requested,
            s.usage_indicator,
            s.delimiters.component,
        )
        self._segments.append(isa)
        self.state = EnvelopeState.INTERCHANGE
        logger.debug(f"Opened interchange {self._interchange_control:09d} ({sender_id} -> {receiver_id})")

    def open_group(self, application_sender: str, application_receiver: str) -> None:
        self._expect(EnvelopeState.INTERCHANGE, "open functional group")
        for value, field in ((application_sender, "GS02"), (application_receiver, "GS03")):
            if not value or not value.strip():
                raise MissingFieldError("Application code is missing or empty.", field=field, segment_id="GS")
        self._group_control = self.control_numbers.group + self._groups_in_interchange
        self._transactions_in_group = 0
        self._segments.append(segment(
            "GS",
            FUNCTIONAL_IDENTIFIER_CODE,
            application_sender,
            application_receiver,
            self.timestamp.strftime("%Y%m%d"),
            self.timestamp.strftime("%H%M"),
            str(self._group_control),
            self.settings.responsible_agency_code,
            self.settings.group_version,
        ))
        self.state = EnvelopeState.GROUP
        logger.debug(f"Opened functional group {self._group_control}")

    def open_transaction(self) -> None:
        self._expect(EnvelopeState.GROUP, "open transaction set")
        control = self.control_numbers.transaction + self._transactions_in_interchange
        if control > 9999:
            raise FieldLengthError(f"Transaction set control number {control} exceeds four digits.", field="ST02", segment_id="ST")
        self._transaction_control = control
        self._segments.append(segment("ST", TRANSACTION_SET_ID, f"{control:04d}"))
        self._segments_in_transaction = 1
        self.state = EnvelopeState.TRANSACTION
        logger.debug(f"Opened transaction set {control:04d}")

    def add_segments(self, body: Iterable[Segment]) -> None:
        self._expect(EnvelopeState.TRANSACTION, "add body segments")
        for seg in body:
            if seg.segment_id in ("ISA", "IEA", "GS", "GE", "ST", "SE"):
                raise EnvelopeStateError(f"Envelope segment '{seg.segment_id}' cannot be added as body content.", segment_id=seg.segment_id)
            self._segments.append(seg)
            self._segments_in_transaction += 1

    def close_transaction(self) -> None:
        self._expect(EnvelopeState.TRANSACTION, "close transaction set")
        # SE01 counts every segment from ST through SE inclusive.
        self._segments_in_transaction += 1
        self._segments.append(segment("SE", str(self._segments_in_transaction), f"{self._transaction_control:04d}"))
        self._transactions_in_group += 1
        self._transactions_in_interchange += 1
        self.state = EnvelopeState.GROUP
        logger.debug(f"Closed transaction set {self._transaction_control:04d} with {self._segments_in_transaction} segments")

    def close_group(self) -> None:
        self._expect(EnvelopeState.GROUP, "close functional group")
        if self._transactions_in_group == 0:
            raise EnvelopeStateError("Functional group contains no transaction sets.", segment_id="GE")
        self._segments.append(segment("GE", str(self._transactions_in_group), str(self._group_control)))
        self._groups_in_interchange += 1
        self.state = EnvelopeState.INTERCHANGE
        logger.debug(f"Closed functional group {self._group_control} with {self._transactions_in_group} transaction sets")

    def close_interchange(self) -> List[Segment]:
        self._expect(EnvelopeState.INTERCHANGE, "close interchange")
        if self._groups_in_interchange == 0:
            raise EnvelopeStateError("Interchange contains no functional groups.", segment_id="IEA")
        self._segments.append(segment("IEA", str(self._groups_in_interchange), f"{self._interchange_control:09d}"))
        self.state = EnvelopeState.CLOSED
        logger.debug(f"Closed interchange {self._interchange_control:09d} with {self._groups_in_interchange} groups")
        return list(self._segments)
