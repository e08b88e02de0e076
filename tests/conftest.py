import pytest
import sys
import os
import logging
from datetime import datetime
from typing import Any, Dict, List

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from remittance_models import PaymentAdvice

# ==============================================================================
# PYTEST CONFIGURATION & HOOKS
# ==============================================================================

def pytest_configure(config):
    """Configure pytest settings and markers."""
    config.addinivalue_line("markers", "unit: Pure unit tests with no external dependencies.")
    config.addinivalue_line("markers", "integration: Tests exercising the full generation pipeline.")

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment(pytestconfig):
    """Set up test environment with logging configuration."""
    log_level = pytestconfig.getoption("log_cli_level") or "INFO"
    logging.basicConfig(
        level=log_level.upper(),
        format="[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.info(f"Test logging configured with level: {log_level.upper()}")
    yield

# ==============================================================================
# TEST DATA UTILITIES
# ==============================================================================

def split_segments(edi: str, terminator: str = "~") -> List[str]:
    """Splits rendered X12 text into segment strings (terminator and line breaks removed)."""
    return [s.strip() for s in edi.split(terminator) if s.strip()]

# ==============================================================================
# SAMPLE REMITTANCE DATA
# ==============================================================================

@pytest.fixture
def fixed_timestamp() -> datetime:
    return datetime(2023, 11, 20, 9, 30, 0)

@pytest.fixture
def simple_advice_data() -> Dict[str, Any]:
    """A single claim with a single office-visit service line."""
    return {
        "payerInfo": {"name": "Blue Cross Blue Shield", "id": "BCBS001"},
        "payeeInfo": {"name": "City Medical Center", "npi": "9876543210", "taxId": "987654321"},
        "checkInfo": {"checkNumber": "EFT567890", "checkDate": "20231120", "checkAmount": "450.00"},
        "claims": [
            {
                "patientControlNumber": "CLAIM001",
                "claimStatusCode": "1",
                "chargeAmount": "500.00",
                "paidAmount": "450.00",
                "patientInfo": {"lastName": "Anderson", "firstName": "Mary", "memberId": "MBR001234"},
                "serviceLines": [
                    {
                        "procedureCode": "99214",
                        "chargeAmount": "500.00",
                        "paidAmount": "450.00",
                        "units": "1",
                        "dateOfService": "20231110",
                    }
                ],
            }
        ],
    }

@pytest.fixture
def complex_advice_data() -> Dict[str, Any]:
    """Two claims with three service lines each; claim payments total 2250.00."""
    return {
        "payerInfo": {"name": "United Healthcare", "id": "UHC123"},
        "payeeInfo": {"name": "Memorial Hospital", "npi": "1111111111", "taxId": "111222333"},
        "checkInfo": {"checkNumber": "CHK789456", "checkDate": "20231120", "checkAmount": "2250.00"},
        "claims": [
            {
                "patientControlNumber": "CLM12345",
                "claimStatusCode": "1",
                "chargeAmount": "1500.00",
                "paidAmount": "1350.00",
                "patientInfo": {"lastName": "Williams", "firstName": "Robert", "memberId": "UHC987654"},
                "serviceLines": [
                    {"procedureCode": "99215", "chargeAmount": "750.00", "paidAmount": "675.00", "units": "1", "dateOfService": "20231105"},
                    {"procedureCode": "85025", "chargeAmount": "250.00", "paidAmount": "225.00", "units": "1", "dateOfService": "20231105"},
                    {"procedureCode": "80053", "chargeAmount": "500.00", "paidAmount": "450.00", "units": "1", "dateOfService": "20231105"},
                ],
            },
            {
                "patientControlNumber": "CLM12346",
                "claimStatusCode": "1",
                "chargeAmount": "1000.00",
                "paidAmount": "900.00",
                "patientInfo": {"lastName": "Davis", "firstName": "Jennifer", "memberId": "UHC654321"},
                "serviceLines": [
                    {"procedureCode": "99213", "chargeAmount": "400.00", "paidAmount": "360.00", "units": "1", "dateOfService": "20231106"},
                    {"procedureCode": "90471", "chargeAmount": "250.00", "paidAmount": "225.00", "units": "1", "dateOfService": "20231106"},
                    {"procedureCode": "90670", "chargeAmount": "350.00", "paidAmount": "315.00", "units": "1", "dateOfService": "20231106"},
                ],
            },
        ],
    }

@pytest.fixture
def simple_advice(simple_advice_data) -> PaymentAdvice:
    return PaymentAdvice.model_validate(simple_advice_data)

@pytest.fixture
def complex_advice(complex_advice_data) -> PaymentAdvice:
    return PaymentAdvice.model_validate(complex_advice_data)
