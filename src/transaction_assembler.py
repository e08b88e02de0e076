import logging
from decimal import Decimal
from typing import List

from x12_segment import Segment
from x12_defs import (
    DateQualifier, ReferenceQualifier,
    EmptyClaimSetError, EmptyServiceLineSetError,
)
from remittance_models import PaymentAdvice, parse_amount, format_amount, sum_paid_amounts
from segment_emitters import (
    build_bpr, build_trn, build_ref, build_dtm, build_payer_n1, build_payee_n1,
    build_clp, build_patient_nm1, build_svc, build_plb,
)

logger = logging.getLogger(__name__)


def _check_structure(advice: PaymentAdvice) -> None:
    """Rejects advices whose claim/service-line nesting cannot form a compliant 835."""
    if not advice.claims:
        raise EmptyClaimSetError("Payment advice contains no claims; total payment cannot be computed.", field="claims")
    for i, claim in enumerate(advice.claims):
        if not claim.service_lines:
            raise EmptyServiceLineSetError(
                f"Claim '{claim.patient_control_number or '?'}' has no service lines.",
                field=f"claims[{i}].serviceLines",
            )


def _log_pass_through_anomalies(advice: PaymentAdvice, total: Decimal) -> None:
    seen = set()
    for claim in advice.claims:
        pcn = claim.patient_control_number
        if pcn and pcn in seen:
            logger.warning(f"Duplicate patient control number '{pcn}' in payment advice.")
        seen.add(pcn)

    # Blank check amounts are skipped; anything else must be a valid amount.
    check_amount = advice.check_info.check_amount if advice.check_info else None
    if check_amount and check_amount.strip():
        declared = parse_amount(check_amount, "checkInfo.checkAmount")
        if declared != total:
            logger.warning(
                f"Check amount {check_amount} differs from the sum of claim payments "
                f"{format_amount(total)}; the computed total is used."
            )


def assemble_transaction(advice: PaymentAdvice, production_date: str) -> List[Segment]:
    """
    Builds the 835 transaction body (everything between ST and SE) in the mandated order:
    BPR, TRN, REF(EV), DTM(405), N1(PR), N1(PE), REF(TJ),
    then per claim CLP, NM1 and per service line SVC, DTM(472), and finally PLB.

    Args:
        advice: The payment advice to transform
        production_date: CCYYMMDD date used for DTM*405 and the PLB fiscal period

    Returns:
        Ordered list of body segments
    """
    _check_structure(advice)
    total = sum_paid_amounts(advice.claims)
    _log_pass_through_anomalies(advice, total)

    payer, payee = advice.payer_info, advice.payee_info
    segments: List[Segment] = [
        build_bpr(advice),
        build_trn(advice.check_info, payer),
        build_ref(ReferenceQualifier.PAYER_IDENTIFICATION.value, payer.id if payer else None, "payerInfo.id"),
        build_dtm(DateQualifier.PRODUCTION.value, production_date, "productionDate"),
        build_payer_n1(payer),
        build_payee_n1(payee),
        build_ref(ReferenceQualifier.TAX_ID.value, payee.tax_id if payee else None, "payeeInfo.taxId"),
    ]

    for i, claim in enumerate(advice.claims):
        claim_path = f"claims[{i}]"
        segments.append(build_clp(claim, claim_path))
        segments.append(build_patient_nm1(claim.patient_info, claim_path))
        for j, line in enumerate(claim.service_lines):
            line_path = f"{claim_path}.serviceLines[{j}]"
            segments.append(build_svc(line, line_path))
            segments.append(build_dtm(DateQualifier.SERVICE.value, line.date_of_service, f"{line_path}.dateOfService"))
        logger.debug(f"Assembled claim {claim.patient_control_number} with {len(claim.service_lines)} service lines.")

    segments.append(build_plb(payee, production_date))

    logger.info(f"Assembled 835 body: {len(advice.claims)} claims, {len(segments)} segments, total paid {format_amount(total)}.")
    return segments
