import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from x12_segment import Segment
from x12_defs import Remittance835Error, MissingFieldError, EnvelopeIntegrityError
from remittance_models import PaymentAdvice
from generator_settings import GeneratorSettings, ControlNumbers, SequentialControlNumberSource
from transaction_assembler import assemble_transaction
from envelope_builder import EnvelopeBuilder
from envelope_validator import validate_envelope
from x12_serializer import X12Serializer

logger = logging.getLogger(__name__)


class Remittance835Generator:
    """Service that turns a PaymentAdvice into a complete X12 835 interchange."""

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        control_number_source: Optional[SequentialControlNumberSource] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or GeneratorSettings()
        self.control_number_source = control_number_source
        self.clock = clock
        self.serializer = X12Serializer(
            self.settings.delimiters,
            reject_collisions=self.settings.reject_delimiter_collisions,
        )

    def _resolve_control_numbers(self, control_numbers: Optional[ControlNumbers]) -> ControlNumbers:
        if control_numbers is not None:
            return control_numbers
        if self.control_number_source is not None:
            return self.control_number_source.next_control_numbers()
        return ControlNumbers()

    def build_segments(
        self,
        advice: PaymentAdvice,
        control_numbers: Optional[ControlNumbers] = None,
        timestamp: Optional[datetime] = None,
    ) -> List[Segment]:
        """
        Assembles the full ordered segment list, ISA through IEA.

        Args:
            advice: The payment advice to transform
            control_numbers: Control numbers for this interchange (defaults to the
                configured source, or 1/1/1 when no source is configured)
            timestamp: Generation time used in ISA/GS and DTM*405 (defaults to the clock)

        Returns:
            Ordered list of segments, envelope included
        """
        timestamp = timestamp or self.clock()
        control_numbers = self._resolve_control_numbers(control_numbers)

        body = assemble_transaction(advice, production_date=timestamp.strftime("%Y%m%d"))

        # The body emitters have already required these records.
        payer_id = advice.payer_info.id
        payee_tax_id = advice.payee_info.tax_id
        if not payee_tax_id or not payee_tax_id.strip():
            raise MissingFieldError("Required field is missing or empty.", field="payeeInfo.taxId", segment_id="ISA")

        builder = EnvelopeBuilder(self.settings, control_numbers, timestamp)
        builder.open_interchange(sender_id=payer_id, receiver_id=payee_tax_id)
        builder.open_group(application_sender=payer_id, application_receiver=payee_tax_id)
        builder.open_transaction()
        builder.add_segments(body)
        builder.close_transaction()
        builder.close_group()
        segments = builder.close_interchange()

        issues = validate_envelope(segments)
        if issues:
            raise EnvelopeIntegrityError("; ".join(issue.message for issue in issues))
        return segments

    def generate(
        self,
        advice: PaymentAdvice,
        control_numbers: Optional[ControlNumbers] = None,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """Generates the 835 text. Any failure aborts generation; no partial output is returned."""
        try:
            logger.info("Starting 835 generation")
            segments = self.build_segments(advice, control_numbers, timestamp)
            output = self.serializer.serialize(segments)
            logger.info(f"835 generation completed: {len(segments)} segments")
            return output
        except Remittance835Error as e:
            logger.error(f"835 generation failed: {e}")
            raise


def generate_835(
    data: Union[PaymentAdvice, Dict[str, Any]],
    settings: Optional[GeneratorSettings] = None,
    control_numbers: Optional[ControlNumbers] = None,
    timestamp: Optional[datetime] = None,
) -> str:
    advice = data if isinstance(data, PaymentAdvice) else PaymentAdvice.model_validate(data)
    return Remittance835Generator(settings).generate(advice, control_numbers, timestamp)
