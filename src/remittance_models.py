import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pydantic import BaseModel, ConfigDict, Field, AliasChoices, model_validator
from typing import Any, Iterable, List, Optional

from x12_defs import DEFAULT_PROCEDURE_QUALIFIER, InvalidAmountError, MissingFieldError

# Domain model for a single payment/remittance advice.
# Every field is optional at load time: absence is reported by the segment
# emitters as MissingFieldError with the field path, not by the loader.

_MODEL_CONFIG = ConfigDict(frozen=True, coerce_numbers_to_str=True)

TWO_PLACES = Decimal("0.01")


def _alias(snake: str, camel: str) -> Any:
    return Field(None, validation_alias=AliasChoices(snake, camel))


class PayerInfo(BaseModel):
    model_config = _MODEL_CONFIG

    name: Optional[str] = None
    id: Optional[str] = None


class PayeeInfo(BaseModel):
    model_config = _MODEL_CONFIG

    name: Optional[str] = None
    npi: Optional[str] = None
    tax_id: Optional[str] = _alias("tax_id", "taxId")


class CheckInfo(BaseModel):
    model_config = _MODEL_CONFIG

    check_number: Optional[str] = _alias("check_number", "checkNumber")
    check_date: Optional[str] = _alias("check_date", "checkDate")
    check_amount: Optional[str] = _alias("check_amount", "checkAmount")


class PatientInfo(BaseModel):
    model_config = _MODEL_CONFIG

    last_name: Optional[str] = _alias("last_name", "lastName")
    first_name: Optional[str] = _alias("first_name", "firstName")
    member_id: Optional[str] = _alias("member_id", "memberId")


class ServiceLine(BaseModel):
    model_config = _MODEL_CONFIG

    procedure_code: Optional[str] = _alias("procedure_code", "procedureCode")
    procedure_qualifier: str = Field(
        DEFAULT_PROCEDURE_QUALIFIER,
        validation_alias=AliasChoices("procedure_qualifier", "procedureQualifier"),
    )
    charge_amount: Optional[str] = _alias("charge_amount", "chargeAmount")
    paid_amount: Optional[str] = _alias("paid_amount", "paidAmount")
    units: Optional[str] = None
    date_of_service: Optional[str] = _alias("date_of_service", "dateOfService")

    @model_validator(mode="before")
    @classmethod
    def _split_qualified_code(cls, data: Any) -> Any:
        """Accepts "HC:99214" style codes by splitting off the qualifier."""
        if not isinstance(data, dict):
            return data
        explicit = data.get("procedure_qualifier", data.get("procedureQualifier"))
        for key in ("procedure_code", "procedureCode"):
            code = data.get(key)
            if isinstance(code, str) and ":" in code:
                qualifier, _, bare_code = code.partition(":")
                if explicit is not None and explicit != qualifier:
                    raise ValueError(
                        f"Procedure code '{code}' carries qualifier '{qualifier}' "
                        f"but procedureQualifier is '{explicit}'."
                    )
                data = {**data, key: bare_code}
                if explicit is None:
                    data["procedure_qualifier"] = qualifier
        return data


class Claim(BaseModel):
    model_config = _MODEL_CONFIG

    patient_control_number: Optional[str] = _alias("patient_control_number", "patientControlNumber")
    claim_status_code: Optional[str] = _alias("claim_status_code", "claimStatusCode")
    charge_amount: Optional[str] = _alias("charge_amount", "chargeAmount")
    paid_amount: Optional[str] = _alias("paid_amount", "paidAmount")
    patient_info: Optional[PatientInfo] = _alias("patient_info", "patientInfo")
    service_lines: List[ServiceLine] = Field(
        default_factory=list,
        validation_alias=AliasChoices("service_lines", "serviceLines"),
    )


class PaymentAdvice(BaseModel):
    """Root of the domain model: one payer paying one payee for a set of claims."""
    model_config = _MODEL_CONFIG

    payer_info: Optional[PayerInfo] = _alias("payer_info", "payerInfo")
    payee_info: Optional[PayeeInfo] = _alias("payee_info", "payeeInfo")
    check_info: Optional[CheckInfo] = _alias("check_info", "checkInfo")
    claims: List[Claim] = Field(default_factory=list)


# --- Amount helpers ---
# X12 "R" elements carry at most 18 characters; plain digits with an optional fraction.
AMOUNT_PATTERN = re.compile(r"\d+(\.\d+)?")
MAX_AMOUNT_LENGTH = 18


def parse_amount(value: Optional[str], field: str) -> Decimal:
    """Parses a monetary amount written as plain non-negative decimal digits (e.g. "450.00")."""
    if value is None or not str(value).strip():
        raise MissingFieldError("Amount is missing or empty.", field=field)
    value = str(value)
    if not AMOUNT_PATTERN.fullmatch(value):
        raise InvalidAmountError(f"Amount '{value}' must be a non-negative decimal like '450.00'.", field=field)
    if len(value) > MAX_AMOUNT_LENGTH:
        raise InvalidAmountError(f"Amount '{value}' exceeds {MAX_AMOUNT_LENGTH} characters.", field=field)
    return Decimal(value)


def format_amount(amount: Decimal, field: str = "amount") -> str:
    try:
        return str(amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise InvalidAmountError(f"Amount {amount} cannot be rounded to two decimals.", field=field)


def sum_paid_amounts(claims: Iterable[Claim]) -> Decimal:
    total = Decimal("0")
    for i, claim in enumerate(claims):
        total += parse_amount(claim.paid_amount, f"claims[{i}].paidAmount")
    return Decimal(format_amount(total, "claims.paidAmount"))
