import logging
import pytest

from generator_settings import Delimiters
from x12_serializer import X12Serializer
from x12_segment import segment
from x12_defs import DelimiterCollisionError

pytestmark = pytest.mark.unit


def test_renders_elements_composites_and_terminator():
    serializer = X12Serializer()
    svc = segment("SVC", ["HC", "99214"], "500.00", "450.00", "", "1")
    assert serializer.render_segment(svc) == "SVC*HC:99214*500.00*450.00**1~"

def test_trailing_empty_elements_are_kept():
    serializer = X12Serializer()
    assert serializer.render_segment(segment("PLB", "9876543210", "20231120", "", "")) == "PLB*9876543210*20231120**~"

def test_custom_delimiters_and_line_ending():
    serializer = X12Serializer(Delimiters(element="|", component="^", segment="!", line_ending="\n"))
    output = serializer.serialize([segment("SVC", ["HC", "99214"], "1"), segment("DTM", "472", "20231110")])
    assert output == "SVC|HC^99214|1!\nDTM|472|20231110!\n"

def test_isa_separator_elements_are_not_collisions():
    serializer = X12Serializer(reject_collisions=True)
    isa = segment("ISA", "00", " " * 10, "00", " " * 10, "ZZ", "S".ljust(15), "ZZ", "R".ljust(15),
                  "240718", "1200", "^", "00501", "000000001", "0", "P", ":")
    assert serializer.render_segment(isa).endswith("*P*:~")

def test_collision_is_rejected_in_strict_mode():
    serializer = X12Serializer(reject_collisions=True)
    with pytest.raises(DelimiterCollisionError) as exc_info:
        serializer.render_segment(segment("N1", "PR", "ACME*HEALTH", "XV", "1"))
    assert exc_info.value.field == "N102"

def test_collision_inside_composite_is_detected():
    serializer = X12Serializer(reject_collisions=True)
    with pytest.raises(DelimiterCollisionError):
        serializer.render_segment(segment("SVC", ["HC", "99:14"], "1"))

def test_collision_is_passed_through_with_warning(caplog):
    serializer = X12Serializer()
    with caplog.at_level(logging.WARNING, logger="x12_serializer"):
        rendered = serializer.render_segment(segment("NM1", "QC", "1", "O~BRIEN"))
    assert rendered == "NM1*QC*1*O~BRIEN~"
    assert "contains separator" in caplog.text
