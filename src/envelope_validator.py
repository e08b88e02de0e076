from enum import Enum
from typing import List, Optional
from pydantic import BaseModel

from x12_segment import Segment

# Fixed ISA01-ISA16 element widths.
ISA_ELEMENT_WIDTHS = [2, 10, 2, 10, 2, 15, 2, 15, 6, 4, 1, 5, 9, 1, 1, 1]


class EnvelopeIssueCode(str, Enum):
    INVALID_CONTROL_STRUCTURE = "INVALID_CONTROL_STRUCTURE"
    INVALID_ISA_ELEMENT_WIDTH = "INVALID_ISA_ELEMENT_WIDTH"
    ICN_MISMATCH_IN_HEADER_TRAILER = "ICN_MISMATCH_IN_HEADER_TRAILER"
    INVALID_GROUP_COUNT = "INVALID_GROUP_COUNT"
    GROUP_CONTROL_NUMBER_MISMATCH = "GROUP_CONTROL_NUMBER_MISMATCH"
    INVALID_TRANSACTION_COUNT = "INVALID_TRANSACTION_COUNT"
    TRANSACTION_CONTROL_NUMBER_MISMATCH = "TRANSACTION_CONTROL_NUMBER_MISMATCH"
    INVALID_SEGMENT_COUNT = "INVALID_SEGMENT_COUNT"


class EnvelopeIssue(BaseModel):
    code: EnvelopeIssueCode
    message: str
    segment_id: Optional[str] = None


def _int_or_none(value) -> Optional[int]:
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def validate_envelope(segments: List[Segment]) -> List[EnvelopeIssue]:
    """
    Re-checks a finished interchange: every trailer must restate its header's
    control number and carry the actual count of the units it closes.
    Returns a list of issues; an empty list means the envelope is consistent.
    """
    issues: List[EnvelopeIssue] = []

    def add_issue(code: EnvelopeIssueCode, message: str, segment_id: Optional[str] = None):
        issues.append(EnvelopeIssue(code=code, message=message, segment_id=segment_id))

    if not segments or segments[0].segment_id != "ISA" or segments[-1].segment_id != "IEA":
        add_issue(EnvelopeIssueCode.INVALID_CONTROL_STRUCTURE, "Interchange must start with ISA and end with IEA.")
        return issues

    isa, iea = segments[0], segments[-1]
    if isa.element_count != len(ISA_ELEMENT_WIDTHS):
        add_issue(EnvelopeIssueCode.INVALID_ISA_ELEMENT_WIDTH, f"ISA has {isa.element_count} elements, expected 16.", "ISA")
    else:
        for pos, width in enumerate(ISA_ELEMENT_WIDTHS, start=1):
            value = isa.get_element(pos)
            if not isinstance(value, str) or len(value) != width:
                add_issue(EnvelopeIssueCode.INVALID_ISA_ELEMENT_WIDTH, f"ISA{pos:02d} must be exactly {width} characters.", "ISA")

    if isa.get_element(13) != iea.get_element(2):
        add_issue(EnvelopeIssueCode.ICN_MISMATCH_IN_HEADER_TRAILER, "ISA13 and IEA02 differ.", "IEA")

    group_count = 0
    gs: Optional[Segment] = None
    st: Optional[Segment] = None
    transactions_in_group = 0
    segments_in_transaction = 0

    for seg in segments[1:-1]:
        sid = seg.segment_id
        if st is not None:
            segments_in_transaction += 1
        if sid == "GS":
            if gs is not None:
                add_issue(EnvelopeIssueCode.INVALID_CONTROL_STRUCTURE, "GS opened before previous group was closed.", sid)
            gs, transactions_in_group = seg, 0
        elif sid == "ST":
            if gs is None or st is not None:
                add_issue(EnvelopeIssueCode.INVALID_CONTROL_STRUCTURE, "ST found outside a functional group or inside another transaction set.", sid)
            st, segments_in_transaction = seg, 1
        elif sid == "SE":
            if st is None:
                add_issue(EnvelopeIssueCode.INVALID_CONTROL_STRUCTURE, "SE without matching ST.", sid)
                continue
            if st.get_element(2) != seg.get_element(2):
                add_issue(EnvelopeIssueCode.TRANSACTION_CONTROL_NUMBER_MISMATCH, "ST02 and SE02 differ.", sid)
            if _int_or_none(seg.get_element(1)) != segments_in_transaction:
                add_issue(EnvelopeIssueCode.INVALID_SEGMENT_COUNT, f"SE01 is {seg.get_element(1)}, actual segment count is {segments_in_transaction}.", sid)
            st = None
            transactions_in_group += 1
        elif sid == "GE":
            if gs is None or st is not None:
                add_issue(EnvelopeIssueCode.INVALID_CONTROL_STRUCTURE, "GE without matching GS or with an open transaction set.", sid)
                continue
            if gs.get_element(6) != seg.get_element(2):
                add_issue(EnvelopeIssueCode.GROUP_CONTROL_NUMBER_MISMATCH, "GS06 and GE02 differ.", sid)
            if _int_or_none(seg.get_element(1)) != transactions_in_group:
                add_issue(EnvelopeIssueCode.INVALID_TRANSACTION_COUNT, f"GE01 is {seg.get_element(1)}, actual transaction count is {transactions_in_group}.", sid)
            gs = None
            group_count += 1
        elif st is None:
            add_issue(EnvelopeIssueCode.INVALID_CONTROL_STRUCTURE, f"Segment '{sid}' found outside a transaction set.", sid)

    if gs is not None or st is not None:
        add_issue(EnvelopeIssueCode.INVALID_CONTROL_STRUCTURE, "Unclosed functional group or transaction set.")

    if _int_or_none(iea.get_element(1)) != group_count:
        add_issue(EnvelopeIssueCode.INVALID_GROUP_COUNT, f"IEA01 is {iea.get_element(1)}, actual group count is {group_count}.", "IEA")

    return issues
