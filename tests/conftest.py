"""
Shared fixtures for the appraisal test suite.
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from appraisal.models import ComparableVehicle, Condition, ExtractedVehicleData


# =============================================================================
# Sample Report Text
# =============================================================================

MITCHELL_REPORT = """\
Mitchell WorkCenter Total Loss
Claim Number: 7730-22-1187
Valuation Date: 03/14/2025

Loss vehicle: 2019 Land Rover Range Rover Sport | 4 Door Utility
Ext Color: Santorini Black
VIN: SALWR2RV5KA123456
45,000 miles
Location: CA 90210

Base Value = $10,066.64
Condition Adjustment = $0.00
Market Value = $10,062.32
Settlement Value = $10,512.55
"""

CCC_REPORT = """\
CCC ONE Market Valuation Report
Owner Information
VIN 1HGCM82633A004352
Year 2003
Make Honda
Model Accord
Odometer 120,500
Location DALLAS, TX 75201
Base Vehicle Value $5,100.00
Adjusted Vehicle Value $5,350.00
Total $5,712.45
"""

VALID_VIN = "1HGCM82633A004352"


@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic tests."""
    return date(2025, 6, 1)


@pytest.fixture
def mitchell_report():
    return MITCHELL_REPORT


@pytest.fixture
def ccc_report():
    return CCC_REPORT


@pytest.fixture
def loss_vehicle():
    """Loss vehicle used by the scoring scenarios."""
    return ExtractedVehicleData(
        vin=VALID_VIN,
        year=2015,
        make="Honda",
        model="Accord",
        mileage=50_000,
        location="Dallas, TX",
        market_value=14_000.00,
        settlement_value=14_500.00,
        equipment=["Navigation", "Sunroof", "Leather Seats"],
        condition=Condition.GOOD,
    )


@pytest.fixture
def create_comp():
    """Factory fixture for creating comparables."""
    counter = {"n": 0}

    def _create(**overrides) -> ComparableVehicle:
        counter["n"] += 1
        fields = dict(
            id=f"comp-{counter['n']}",
            source="AutoTrader",
            year=2015,
            make="Honda",
            model="Accord",
            mileage=50_000,
            location="Fort Worth, TX",
            list_price=15_000.00,
            condition=Condition.GOOD,
            equipment=["Navigation", "Sunroof", "Leather Seats"],
        )
        fields.update(overrides)
        return ComparableVehicle(**fields)

    return _create
