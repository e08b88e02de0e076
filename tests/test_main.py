"""
Tests for the command line wrapper: JSON file in, 835 file out.
"""

import pytest
import sys
import os
import json
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

# Add repository root to path so main.py can be imported
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import main
from remittance_generator import Remittance835Generator

pytestmark = pytest.mark.integration


@pytest.fixture
def input_file(tmp_path: Path, complex_advice_data) -> Path:
    path = tmp_path / "remit.json"
    path.write_text(json.dumps(complex_advice_data))
    return path

@pytest.fixture
def frozen_clock():
    real_init = Remittance835Generator.__init__

    def init_with_fixed_clock(self, settings=None, control_number_source=None, clock=None):
        real_init(self, settings, control_number_source, clock=lambda: datetime(2023, 11, 20, 9, 30))

    with patch.object(Remittance835Generator, "__init__", init_with_fixed_clock):
        yield


def test_writes_default_output_next_to_input(input_file: Path, frozen_clock):
    assert main.main([str(input_file)]) == 0
    output = input_file.with_suffix(".edi").read_text()
    assert output.startswith("ISA*")
    assert output.endswith("IEA*1*000000001~")
    assert "BPR*I*2250.00*C*ACH" in output

def test_options_are_applied(input_file: Path, tmp_path: Path, frozen_clock):
    out = tmp_path / "out.edi"
    assert main.main([str(input_file), str(out), "--test", "--line-breaks", "--control-number", "7"]) == 0
    lines = out.read_text().splitlines()
    assert lines[0].endswith("*000000007*0*T*:~")
    assert lines[-1] == "IEA*1*000000007~"

def test_missing_input_file_returns_error(tmp_path: Path):
    assert main.main([str(tmp_path / "missing.json")]) == 1

def test_invalid_json_returns_error(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text("{'not': json}")
    assert main.main([str(bad)]) == 1

def test_generation_error_returns_error_and_writes_nothing(input_file: Path, complex_advice_data):
    complex_advice_data["claims"][0]["serviceLines"] = []
    input_file.write_text(json.dumps(complex_advice_data))
    assert main.main([str(input_file)]) == 1
    assert not input_file.with_suffix(".edi").exists()

def test_control_number_out_of_range_returns_error(input_file: Path):
    assert main.main([str(input_file), "--control-number", "10000"]) == 1

def test_oversized_amount_returns_error(input_file: Path, complex_advice_data):
    complex_advice_data["claims"][0]["paidAmount"] = "1e30"
    input_file.write_text(json.dumps(complex_advice_data))
    assert main.main([str(input_file)]) == 1
    assert not input_file.with_suffix(".edi").exists()

def test_unknown_log_level_is_rejected_by_parser(input_file: Path):
    with pytest.raises(SystemExit) as exc_info:
        main.main([str(input_file), "--log-level", "LOUD"])
    assert exc_info.value.code == 2

def test_log_level_is_case_insensitive(input_file: Path, frozen_clock):
    assert main.main([str(input_file), "--log-level", "debug"]) == 0
