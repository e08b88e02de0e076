import pytest
import threading
from pydantic import ValidationError

from generator_settings import Delimiters, GeneratorSettings, ControlNumbers, SequentialControlNumberSource

pytestmark = pytest.mark.unit


def test_defaults():
    settings = GeneratorSettings()
    assert settings.delimiters.active() == ("*", ":", "~")
    assert settings.delimiters.line_ending == ""
    assert settings.usage_indicator == "P"
    assert settings.group_version == "005010X221A1"
    assert settings.reject_delimiter_collisions is False

@pytest.mark.parametrize("kwargs", [
    {"element": "A"},
    {"segment": "~~"},
    {"component": ""},
    {"element": ":", "component": ":"},
    {"line_ending": "x"},
])
def test_invalid_delimiters_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        Delimiters(**kwargs)

def test_repetition_separator_must_not_collide():
    with pytest.raises(ValidationError):
        GeneratorSettings(repetition_separator="*")

def test_usage_indicator_is_restricted():
    with pytest.raises(ValidationError):
        GeneratorSettings(usage_indicator="X")

def test_control_number_bounds():
    with pytest.raises(ValidationError):
        ControlNumbers(interchange=0)
    with pytest.raises(ValidationError):
        ControlNumbers(transaction=10000)

def test_sequential_source_is_monotonic_per_instance():
    source = SequentialControlNumberSource(start=7)
    first, second = source.next_control_numbers(), source.next_control_numbers()
    assert (first.interchange, second.interchange) == (7, 8)
    assert first.group == 7 and first.transaction == 7

    other = SequentialControlNumberSource()
    assert other.next_control_numbers().interchange == 1

def test_sequential_source_wraps_transaction_number():
    source = SequentialControlNumberSource(start=10000)
    numbers = source.next_control_numbers()
    assert numbers.interchange == 10000
    assert numbers.transaction == 1

def test_sequential_source_is_thread_safe():
    source = SequentialControlNumberSource()
    issued = []
    lock = threading.Lock()

    def draw():
        for _ in range(50):
            value = source.next_control_numbers().interchange
            with lock:
                issued.append(value)

    threads = [threading.Thread(target=draw) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(issued) == list(range(1, 201))
