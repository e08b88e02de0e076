from pydantic import BaseModel, Field
from typing import List, Optional, Union

# A plain element is a string; a composite element is an ordered list of
# sub-element strings joined later by the component separator.
Element = Union[str, List[str]]


class Segment(BaseModel):
    """Represents a single outbound X12 segment: a tag plus ordered elements."""
    segment_id: str
    elements: List[Element] = Field(default_factory=list)

    def get_element(self, position: int) -> Optional[Element]:
        """Retrieves an element by its position (1-based index)."""
        if 1 <= position <= len(self.elements):
            return self.elements[position - 1]
        return None

    def is_composite(self, position: int) -> bool:
        return isinstance(self.get_element(position), list)

    @property
    def element_count(self) -> int:
        return len(self.elements)

    def iter_values(self):
        """Yields (position, value) for every simple value, flattening composites."""
        for idx, element in enumerate(self.elements, start=1):
            if isinstance(element, list):
                for sub_value in element:
                    yield idx, sub_value
            else:
                yield idx, element


def segment(segment_id: str, *elements: Element) -> Segment:
    return Segment(segment_id=segment_id, elements=list(elements))
