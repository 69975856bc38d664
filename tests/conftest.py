"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.
"""

from datetime import date
from decimal import Decimal

import pytest

from gymcycle.core import config as config_module
from gymcycle.core.enums import DiscountType
from gymcycle.schemas.cycle import MembershipCycle
from gymcycle.schemas.plan import RawPlan
from gymcycle.services.adapters import (
    InMemoryMembershipSink,
    InMemoryPaymentRecorder,
    InMemoryPlanSource,
)
from gymcycle.services.due_date_calculator import DueDateCalculator
from gymcycle.services.eligibility_gate import EligibilityGate, EligibilityPolicy
from gymcycle.services.plan_catalog import PlanCatalog


@pytest.fixture
def raw_plans():
    """Plan rows as a plan source would return them."""
    return [
        RawPlan(id="monthly", name="Monthly", base_months=1, price=Decimal("1000")),
        RawPlan(id="quarterly", name="Quarterly", base_months=3, price=Decimal("2700")),
        RawPlan(
            id="promo-3-1",
            name="Quarterly + 1 free",
            base_months=3,
            bonus_months=1,
            price=Decimal("3000"),
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("10"),
        ),
        RawPlan(id="half", name="Half yearly", duration_months=6, price=Decimal("5000")),
        RawPlan(
            id="annual-old",
            name="Annual (retired)",
            base_months=12,
            price=Decimal("9000"),
            is_active=False,
        ),
    ]


@pytest.fixture
def catalog():
    """Plan catalog instance."""
    return PlanCatalog()


@pytest.fixture
def plans(catalog, raw_plans):
    """Normalized eligible plans."""
    return catalog.normalize(raw_plans)


@pytest.fixture
def monthly_plan(plans):
    return next(p for p in plans if p.id == "monthly")


@pytest.fixture
def promo_plan(plans):
    return next(p for p in plans if p.id == "promo-3-1")


@pytest.fixture
def calculator():
    return DueDateCalculator()


@pytest.fixture
def gate():
    """Eligibility gate with the default 7-day payment window."""
    return EligibilityGate(EligibilityPolicy(payment_window_days=7))


@pytest.fixture
def cycle():
    """Cycle anchored on the 1st, due 2024-01-01."""
    return MembershipCycle(
        anchor_day=1,
        current_due_date=date(2024, 1, 1),
        joining_date=date(2023, 12, 1),
    )


@pytest.fixture
def recorder():
    """In-memory payment recorder."""
    return InMemoryPaymentRecorder()


@pytest.fixture
def membership_sink():
    """In-memory deactivation/reactivation sink."""
    return InMemoryMembershipSink()


@pytest.fixture
def plan_source(raw_plans):
    """In-memory plan source seeded with the raw plans."""
    return InMemoryPlanSource(raw_plans)


@pytest.fixture
def reset_settings():
    """Drop the cached billing settings before and after a test."""
    config_module._billing_settings = None
    yield
    config_module._billing_settings = None


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
