import logging
import re
from datetime import datetime
from typing import Optional

from x12_segment import Segment, segment
from x12_defs import (
    EntityIdentifierCode, IdentificationQualifier, EntityTypeQualifier,
    CLAIM_FILING_INDICATOR, TRACE_TYPE_CODE, TRANSACTION_HANDLING_CODE,
    CREDIT_DEBIT_FLAG, PAYMENT_METHOD_CODE,
    MissingFieldError, InvalidDateError,
)
from remittance_models import (
    PaymentAdvice, PayerInfo, PayeeInfo, CheckInfo, Claim, PatientInfo, ServiceLine,
    parse_amount, format_amount, sum_paid_amounts,
)

logger = logging.getLogger(__name__)

# Each emitter is a pure function from part of the domain model to one Segment.
# `path` arguments name the field location in the input (e.g. "claims[0]") so
# errors point back at the offending record.


# --- Validation Helpers ---
def _require(value: Optional[str], field: str, segment_id: str) -> str:
    if value is None or not str(value).strip():
        raise MissingFieldError("Required field is missing or empty.", field=field, segment_id=segment_id)
    return value

def _require_part(part, field: str, segment_id: str):
    if part is None:
        raise MissingFieldError("Required record is missing.", field=field, segment_id=segment_id)
    return part

def _require_amount(value: Optional[str], field: str, segment_id: str) -> str:
    """Validates an amount but returns it verbatim; only BPR02 is recomputed."""
    _require(value, field, segment_id)
    parse_amount(value, field)
    return value

def _require_date(value: Optional[str], field: str, segment_id: str) -> str:
    _require(value, field, segment_id)
    if not (len(value) == 8 and value.isdigit()):
        raise InvalidDateError(f"Date '{value}' must be 8 digits (CCYYMMDD).", field=field, segment_id=segment_id)
    try:
        datetime.strptime(value, '%Y%m%d')
    except ValueError:
        raise InvalidDateError(f"Date '{value}' is not a valid calendar date.", field=field, segment_id=segment_id)
    return value


# --- Header-level emitters ---
def build_bpr(advice: PaymentAdvice) -> Segment:
    """
    BPR - Financial Information.
    The total is always recomputed from the claims, never taken from the check record.
    """
    payer = _require_part(advice.payer_info, "payerInfo", "BPR")
    check = _require_part(advice.check_info, "checkInfo", "BPR")
    total = format_amount(sum_paid_amounts(advice.claims))
    return segment(
        "BPR",
        TRANSACTION_HANDLING_CODE,
        total,
        CREDIT_DEBIT_FLAG,
        PAYMENT_METHOD_CODE,
        "", "", "", "", "",                # BPR05-09: payment format and sender bank account
        _require(payer.id, "payerInfo.id", "BPR"),
        "", "", "", "", "",                # BPR11-15: originating company and receiver bank account
        _require_date(check.check_date, "checkInfo.checkDate", "BPR"),
    )

def build_trn(check: Optional[CheckInfo], payer: Optional[PayerInfo]) -> Segment:
    """TRN - Reassociation Trace Number."""
    check = _require_part(check, "checkInfo", "TRN")
    payer = _require_part(payer, "payerInfo", "TRN")
    return segment(
        "TRN",
        TRACE_TYPE_CODE,
        _require(check.check_number, "checkInfo.checkNumber", "TRN"),
        _require(payer.id, "payerInfo.id", "TRN"),
    )

def build_ref(qualifier: str, value: Optional[str], field: str) -> Segment:
    return segment("REF", qualifier, _require(value, field, "REF"))

def build_dtm(qualifier: str, date: Optional[str], field: str) -> Segment:
    return segment("DTM", qualifier, _require_date(date, field, "DTM"))

def build_payer_n1(payer: Optional[PayerInfo]) -> Segment:
    payer = _require_part(payer, "payerInfo", "N1")
    return segment(
        "N1",
        EntityIdentifierCode.PAYER.value,
        _require(payer.name, "payerInfo.name", "N1"),
        IdentificationQualifier.PAYER_ID.value,
        _require(payer.id, "payerInfo.id", "N1"),
    )

def build_payee_n1(payee: Optional[PayeeInfo]) -> Segment:
    # NPI format is not checked; non-numeric content passes through.
    payee = _require_part(payee, "payeeInfo", "N1")
    return segment(
        "N1",
        EntityIdentifierCode.PAYEE.value,
        _require(payee.name, "payeeInfo.name", "N1"),
        IdentificationQualifier.NPI.value,
        _require(payee.npi, "payeeInfo.npi", "N1"),
    )


# --- Claim-level emitters ---
def build_clp(claim: Claim, path: str = "claim") -> Segment:
    """CLP - Claim Payment Information. Amounts are emitted exactly as supplied."""
    pcn = _require(claim.patient_control_number, f"{path}.patientControlNumber", "CLP")
    return segment(
        "CLP",
        pcn,
        _require(claim.claim_status_code, f"{path}.claimStatusCode", "CLP"),
        _require_amount(claim.charge_amount, f"{path}.chargeAmount", "CLP"),
        _require_amount(claim.paid_amount, f"{path}.paidAmount", "CLP"),
        "",                                # CLP05: patient responsibility
        CLAIM_FILING_INDICATOR,
        pcn,                               # CLP07: payer claim control number
        "",                                # CLP08: facility type
    )

def build_patient_nm1(patient: Optional[PatientInfo], path: str = "claim") -> Segment:
    patient = _require_part(patient, f"{path}.patientInfo", "NM1")
    return segment(
        "NM1",
        EntityIdentifierCode.PATIENT.value,
        EntityTypeQualifier.PERSON.value,
        _require(patient.last_name, f"{path}.patientInfo.lastName", "NM1"),
        _require(patient.first_name, f"{path}.patientInfo.firstName", "NM1"),
        "", "", "",                        # NM105-07: middle name, prefix, suffix
        IdentificationQualifier.MEMBER_ID.value,
        _require(patient.member_id, f"{path}.patientInfo.memberId", "NM1"),
    )

def build_svc(line: ServiceLine, path: str = "serviceLine") -> Segment:
    """SVC - Service Payment Information with a qualifier:code composite in SVC01."""
    procedure = [
        _require(line.procedure_qualifier, f"{path}.procedureQualifier", "SVC"),
        _require(line.procedure_code, f"{path}.procedureCode", "SVC"),
    ]
    units = _require(line.units, f"{path}.units", "SVC")
    if not re.fullmatch(r"\d+", units.strip()):
        logger.warning(f"Units '{units}' at {path} is not a whole number; emitting as given.")
    return segment(
        "SVC",
        procedure,
        _require_amount(line.charge_amount, f"{path}.chargeAmount", "SVC"),
        _require_amount(line.paid_amount, f"{path}.paidAmount", "SVC"),
        "",                                # SVC04: revenue code
        units,
    )

def build_plb(payee: Optional[PayeeInfo], fiscal_date: str) -> Segment:
    """
    PLB - Provider Level Adjustment.
    Always emitted; reason and amount stay blank when no adjustment applies.
    """
    payee = _require_part(payee, "payeeInfo", "PLB")
    return segment(
        "PLB",
        _require(payee.npi, "payeeInfo.npi", "PLB"),
        _require_date(fiscal_date, "fiscalDate", "PLB"),
        "",
        "",
    )
