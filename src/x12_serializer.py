import logging
from typing import Iterable, List, Optional

from x12_segment import Segment
from x12_defs import DelimiterCollisionError
from generator_settings import Delimiters

logger = logging.getLogger(__name__)

# ISA11 (repetition separator) and ISA16 (component separator) carry
# separator characters by definition.
_EXEMPT_POSITIONS = {"ISA": {11, 16}}


class X12Serializer:
    """
    Renders segments to X12 text. Data values are not escaped: a value that
    contains an active separator is reported (warning, or DelimiterCollisionError
    when reject_collisions is set) and otherwise written as-is.
    """

    def __init__(self, delimiters: Optional[Delimiters] = None, reject_collisions: bool = False):
        self.delimiters = delimiters or Delimiters()
        self.reject_collisions = reject_collisions

    def _check_collisions(self, seg: Segment) -> None:
        exempt = _EXEMPT_POSITIONS.get(seg.segment_id, set())
        active = self.delimiters.active()
        for position, value in seg.iter_values():
            if position in exempt:
                continue
            clashing = [d for d in active if d in value]
            if not clashing:
                continue
            message = f"Value '{value}' in {seg.segment_id}{position:02d} contains separator(s) {clashing}."
            if self.reject_collisions:
                raise DelimiterCollisionError(message, field=f"{seg.segment_id}{position:02d}", segment_id=seg.segment_id)
            logger.warning(f"{message} Output will not parse back as written.")

    def render_segment(self, seg: Segment) -> str:
        self._check_collisions(seg)
        d = self.delimiters
        rendered_elements: List[str] = [
            d.component.join(element) if isinstance(element, list) else element
            for element in seg.elements
        ]
        return d.element.join([seg.segment_id] + rendered_elements) + d.segment + d.line_ending

    def serialize(self, segments: Iterable[Segment]) -> str:
        output = "".join(self.render_segment(seg) for seg in segments)
        logger.debug(f"Serialized interchange: {len(output)} characters")
        return output
