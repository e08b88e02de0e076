from enum import Enum
from typing import Optional


class EntityIdentifierCode(str, Enum):
    """N101 / NM101 entity roles used by the 835."""
    PAYER = "PR"
    PAYEE = "PE"
    PATIENT = "QC"


class IdentificationQualifier(str, Enum):
    """N103 / NM108 identification code qualifiers."""
    PAYER_ID = "XV"
    NPI = "XX"
    MEMBER_ID = "MI"


class ReferenceQualifier(str, Enum):
    PAYER_IDENTIFICATION = "EV"
    TAX_ID = "TJ"


class DateQualifier(str, Enum):
    PRODUCTION = "405"
    SERVICE = "472"


class EntityTypeQualifier(str, Enum):
    PERSON = "1"
    NON_PERSON = "2"


# Fixed 835 values
FUNCTIONAL_IDENTIFIER_CODE = "HP"
TRANSACTION_SET_ID = "835"
CLAIM_FILING_INDICATOR = "12"
TRACE_TYPE_CODE = "1"
TRANSACTION_HANDLING_CODE = "I"
CREDIT_DEBIT_FLAG = "C"
PAYMENT_METHOD_CODE = "ACH"
DEFAULT_PROCEDURE_QUALIFIER = "HC"


class Remittance835Error(Exception):
    """Base class for every failure raised while building an 835."""

    def __init__(self, message: str, field: Optional[str] = None, segment_id: Optional[str] = None):
        self.message = message
        self.field = field
        self.segment_id = segment_id
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.segment_id:
            parts.append(f"Segment: {self.segment_id}")
        if self.field:
            parts.append(f"Field: {self.field}")
        return " | ".join(parts)


class MissingFieldError(Remittance835Error):
    """A required domain field is absent or empty."""


class InvalidAmountError(Remittance835Error):
    """An amount does not parse as a non-negative decimal."""


class InvalidDateError(Remittance835Error):
    """A date element is not an 8-digit CCYYMMDD date."""


class EmptyClaimSetError(Remittance835Error):
    """The advice carries no claims, so no payment total can be computed."""


class EmptyServiceLineSetError(Remittance835Error):
    """A claim carries no service lines."""


class FieldLengthError(Remittance835Error):
    """A value does not fit a fixed-width envelope element."""


class DelimiterCollisionError(Remittance835Error):
    """A data value contains one of the active separator characters."""


class EnvelopeStateError(Remittance835Error):
    """An envelope level was opened or closed out of order."""


class EnvelopeIntegrityError(Remittance835Error):
    """A finished envelope failed its header/trailer pairing checks."""
