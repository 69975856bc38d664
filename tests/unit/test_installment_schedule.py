"""
Unit tests for installment schedules.
"""

from datetime import date
from decimal import Decimal

import pytest

from gymcycle.core.enums import (
    InstallmentPlanStatus,
    InstallmentStatus,
    LegacyPlanCategory,
    PaymentMethod,
)
from gymcycle.services.installment_schedule import InstallmentScheduler, split_amount
from gymcycle.utils.errors import (
    InstallmentAlreadyPaidError,
    InstallmentNotFoundError,
    InstallmentPlanClosedError,
    InvalidInstallmentPlanError,
)

START = date(2024, 1, 10)


@pytest.fixture
def scheduler(gate):
    return InstallmentScheduler(gate)


@pytest.fixture
def schedule(scheduler, monthly_plan):
    """1000 over 3 installments, 15 days apart, starting 2024-01-10."""
    return scheduler.build(
        "M-1", monthly_plan, 3, START, PaymentMethod.UPI, frequency_days=15
    )


class TestSplitAmount:
    """Tests for splitting a total into cent installments."""

    def test_last_takes_remainder(self):
        """Test 1000 over 3 leaves the extra cent on the last installment."""
        assert split_amount(Decimal("1000"), 3) == [
            Decimal("333.33"),
            Decimal("333.33"),
            Decimal("333.34"),
        ]

    def test_even_split(self):
        assert split_amount(Decimal("100"), 4) == [Decimal("25.00")] * 4

    def test_always_sums_to_total(self):
        amounts = split_amount(Decimal("2700"), 7)
        assert amounts[:-1] == [Decimal("385.71")] * 6
        assert amounts[-1] == Decimal("385.74")
        assert sum(amounts) == Decimal("2700.00")

    def test_zero_installments_rejected(self):
        with pytest.raises(InvalidInstallmentPlanError):
            split_amount(Decimal("100"), 0)


class TestBuild:
    """Tests for InstallmentScheduler.build."""

    def test_due_dates_step_by_frequency(self, schedule):
        assert [i.due_date for i in schedule.installments] == [
            date(2024, 1, 10),
            date(2024, 1, 25),
            date(2024, 2, 9),
        ]

    def test_first_installment_paid(self, schedule):
        """Test installment 1 is collected at signup."""
        first = schedule.installment(1)
        assert first.status == InstallmentStatus.PAID
        assert first.paid_date == START
        assert first.payment_method == PaymentMethod.UPI
        assert [i.status for i in schedule.installments[1:]] == [InstallmentStatus.PENDING] * 2

    def test_amounts(self, schedule):
        assert schedule.total_amount == Decimal("1000.00")
        assert schedule.installment_amount == Decimal("333.33")
        assert schedule.paid_amount == Decimal("333.33")
        assert schedule.remaining_amount == Decimal("666.67")
        assert schedule.paid_count == 1
        assert schedule.status == InstallmentPlanStatus.ACTIVE

    def test_legacy_category_counts_bonus_months(self, scheduler, promo_plan):
        """Test a 3 + 1 promo plan bought in installments is half-yearly."""
        schedule = scheduler.build("M-1", promo_plan, 2, START, PaymentMethod.CASH)
        assert schedule.legacy_category == LegacyPlanCategory.HALF_YEARLY
        assert schedule.total_amount == Decimal("2700.00")

    def test_explicit_total(self, scheduler, monthly_plan):
        schedule = scheduler.build(
            "M-1", monthly_plan, 2, START, PaymentMethod.CASH, total_amount=Decimal("900")
        )
        assert [i.amount for i in schedule.installments] == [Decimal("450.00")] * 2

    def test_default_frequency_from_settings(self, scheduler, monthly_plan, reset_settings):
        schedule = scheduler.build("M-1", monthly_plan, 2, START, PaymentMethod.CASH)
        assert schedule.frequency_days == 30
        assert schedule.installment(2).due_date == date(2024, 2, 9)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"num_installments": 1},
            {"num_installments": 3, "frequency_days": 0},
            {"num_installments": 3, "total_amount": Decimal("0")},
        ],
    )
    def test_invalid_inputs(self, scheduler, monthly_plan, kwargs):
        with pytest.raises(InvalidInstallmentPlanError) as exc:
            scheduler.build(
                "M-1", monthly_plan, first_payment_date=START,
                first_payment_method=PaymentMethod.CASH, **kwargs,
            )
        assert exc.value.code == "invalid_installment_plan"


class TestPay:
    """Tests for paying installments."""

    def test_completes_when_all_paid(self, scheduler, schedule):
        schedule = scheduler.pay(schedule, 2, date(2024, 1, 25), PaymentMethod.CASH)
        assert schedule.status == InstallmentPlanStatus.ACTIVE
        schedule = scheduler.pay(schedule, 3, date(2024, 2, 9), PaymentMethod.CARD)
        assert schedule.status == InstallmentPlanStatus.COMPLETED
        assert schedule.remaining_amount == Decimal("0")
        assert schedule.paid_amount == Decimal("1000.00")

    def test_overdue_installment_payable(self, scheduler, schedule):
        schedule, _ = scheduler.refresh_overdue(schedule, date(2024, 2, 1))
        schedule = scheduler.pay(schedule, 2, date(2024, 2, 1), PaymentMethod.CASH)
        assert schedule.installment(2).status == InstallmentStatus.PAID

    def test_already_paid_rejected(self, scheduler, schedule):
        with pytest.raises(InstallmentAlreadyPaidError):
            scheduler.pay(schedule, 1, START, PaymentMethod.CASH)

    def test_unknown_number_rejected(self, scheduler, schedule):
        with pytest.raises(InstallmentNotFoundError):
            scheduler.pay(schedule, 9, START, PaymentMethod.CASH)

    def test_cancelled_plan_rejected(self, scheduler, schedule):
        schedule = scheduler.cancel(schedule)
        with pytest.raises(InstallmentPlanClosedError):
            scheduler.pay(schedule, 2, START, PaymentMethod.CASH)


class TestRefreshOverdue:
    """Tests for marking past-due installments overdue."""

    def test_past_due_marked(self, scheduler, schedule):
        """Test only installments whose due date has passed turn overdue."""
        updated, marked = scheduler.refresh_overdue(schedule, date(2024, 1, 26))
        assert marked == 1
        assert [i.status for i in updated.installments] == [
            InstallmentStatus.PAID,
            InstallmentStatus.OVERDUE,
            InstallmentStatus.PENDING,
        ]

    def test_due_today_not_overdue(self, scheduler, schedule):
        updated, marked = scheduler.refresh_overdue(schedule, date(2024, 1, 25))
        assert marked == 0
        assert updated is schedule

    def test_idempotent(self, scheduler, schedule):
        updated, _ = scheduler.refresh_overdue(schedule, date(2024, 3, 1))
        again, marked = scheduler.refresh_overdue(updated, date(2024, 3, 1))
        assert marked == 0
        assert again.remaining_amount == Decimal("666.67")


class TestDueAndUpcoming:
    """Tests for the due and upcoming installment lists."""

    def test_due_includes_today_and_past(self, scheduler, schedule):
        items = scheduler.due([schedule], date(2024, 1, 25))
        assert [i.installment.number for i in items] == [2]
        assert items[0].days_overdue == 0

        items = scheduler.due([schedule], date(2024, 2, 14))
        assert [(i.installment.number, i.days_overdue) for i in items] == [(2, 20), (3, 5)]

    def test_due_skips_paid(self, scheduler, schedule):
        schedule = scheduler.pay(schedule, 2, date(2024, 1, 25), PaymentMethod.CASH)
        assert scheduler.due([schedule], date(2024, 1, 30)) == []

    def test_upcoming_within_horizon(self, scheduler, schedule):
        items = scheduler.upcoming([schedule], date(2024, 1, 20), days_ahead=7)
        assert [i.installment.number for i in items] == [2]
        assert items[0].days_left == 5

    def test_upcoming_excludes_due_today(self, scheduler, schedule):
        items = scheduler.upcoming([schedule], date(2024, 1, 25), days_ahead=30)
        assert [i.installment.number for i in items] == [3]

    def test_upcoming_outside_horizon(self, scheduler, schedule):
        assert scheduler.upcoming([schedule], date(2024, 1, 20), days_ahead=3) == []

    def test_upcoming_default_horizon(self, scheduler, schedule, reset_settings, monkeypatch):
        monkeypatch.setenv("BILLING_INSTALLMENT_LOOKAHEAD_DAYS", "4")
        assert scheduler.upcoming([schedule], date(2024, 1, 20)) == []

    def test_across_members(self, scheduler, monthly_plan, schedule):
        other = scheduler.build(
            "M-2", monthly_plan, 2, date(2024, 1, 5), PaymentMethod.CASH, frequency_days=15
        )
        items = scheduler.due([schedule, other], date(2024, 1, 25))
        assert [(i.schedule.member_id, i.installment.number) for i in items] == [
            ("M-2", 2),
            ("M-1", 2),
        ]


class TestCancel:
    """Tests for cancelling an installment plan."""

    def test_waives_unpaid(self, scheduler, schedule):
        cancelled = scheduler.cancel(schedule)
        assert cancelled.status == InstallmentPlanStatus.CANCELLED
        assert [i.status for i in cancelled.installments] == [
            InstallmentStatus.PAID,
            InstallmentStatus.WAIVED,
            InstallmentStatus.WAIVED,
        ]
        assert cancelled.remaining_amount == Decimal("0")
        assert cancelled.paid_amount == Decimal("333.33")

    def test_waives_overdue(self, scheduler, schedule):
        schedule, _ = scheduler.refresh_overdue(schedule, date(2024, 2, 1))
        cancelled = scheduler.cancel(schedule)
        assert cancelled.installment(2).status == InstallmentStatus.WAIVED

    def test_completed_plan_rejected(self, scheduler, schedule):
        schedule = scheduler.pay(schedule, 2, date(2024, 1, 25), PaymentMethod.CASH)
        schedule = scheduler.pay(schedule, 3, date(2024, 2, 9), PaymentMethod.CASH)
        with pytest.raises(InstallmentPlanClosedError):
            scheduler.cancel(schedule)

    def test_cancelled_twice_rejected(self, scheduler, schedule):
        with pytest.raises(InstallmentPlanClosedError) as exc:
            scheduler.cancel(scheduler.cancel(schedule))
        assert exc.value.code == "installment_plan_closed"
