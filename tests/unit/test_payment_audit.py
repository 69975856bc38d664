"""
Unit tests for payment history replay and audit.
"""

from datetime import date, datetime, timezone

import pytest

from gymcycle.core.enums import MembershipEventType
from gymcycle.services.payment_audit import HistoryEvent, PaymentAuditor, PaymentEntry


@pytest.fixture
def auditor(calculator):
    return PaymentAuditor(calculator)


class TestReplay:
    """Tests for PaymentAuditor.replay."""

    def test_no_payments(self, auditor):
        assert auditor.replay(date(2024, 1, 1), 1, []) == (None, "No payments")

    def test_single_payment(self, auditor):
        """Test the first payment projects from the joining date."""
        expected, note = auditor.replay(
            date(2024, 1, 31), 1, [PaymentEntry(payment_date=date(2024, 1, 31))]
        )
        assert expected == date(2024, 2, 29)
        assert note == "Single payment"

    def test_renewals_chain_from_due_date(self, auditor):
        """Test later payments extend the running due date, anchored on the joining day."""
        payments = [
            PaymentEntry(payment_date=date(2024, 1, 31)),
            PaymentEntry(payment_date=date(2024, 3, 5)),
            PaymentEntry(payment_date=date(2024, 3, 30)),
        ]
        expected, note = auditor.replay(date(2024, 1, 31), 1, payments)
        assert expected == date(2024, 4, 30)
        assert note == "3 payments"

    def test_payment_order_independent_of_input_order(self, auditor):
        """Test payments are replayed by date and creation time."""
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        payments = [
            PaymentEntry(payment_date=date(2024, 2, 1), created_at=created),
            PaymentEntry(payment_date=date(2024, 1, 1), created_at=created),
        ]
        expected, _ = auditor.replay(date(2024, 1, 1), 1, payments)
        assert expected == date(2024, 3, 1)

    def test_per_payment_months(self, auditor):
        payments = [
            PaymentEntry(payment_date=date(2024, 1, 1), total_months=3),
            PaymentEntry(payment_date=date(2024, 4, 1)),
        ]
        expected, _ = auditor.replay(date(2024, 1, 1), 1, payments)
        assert expected == date(2024, 5, 1)

    def test_anchor_shift_event(self, auditor):
        """Test a shift re-anchors the schedule from the shift date."""
        payments = [
            PaymentEntry(payment_date=date(2023, 12, 1)),
            PaymentEntry(payment_date=date(2024, 1, 10)),
            PaymentEntry(payment_date=date(2024, 2, 10)),
        ]
        events = [
            HistoryEvent(
                event_type=MembershipEventType.BASE_DATE_SHIFTED,
                event_date=date(2024, 1, 10),
                shift_to_date=date(2024, 1, 10),
            )
        ]
        expected, _ = auditor.replay(date(2023, 12, 1), 1, payments, events)
        assert expected == date(2024, 3, 10)

    def test_reactivation_starts_new_epoch(self, auditor):
        """Test a reactivation re-bases the replay on the rejoin date."""
        payments = [
            PaymentEntry(payment_date=date(2023, 6, 1)),
            PaymentEntry(payment_date=date(2024, 1, 5)),
        ]
        events = [
            HistoryEvent(
                event_type=MembershipEventType.MEMBER_REACTIVATED,
                event_date=date(2024, 1, 5),
                new_joining_date=date(2024, 1, 5),
            )
        ]
        expected, note = auditor.replay(date(2023, 6, 1), 1, payments, events)
        assert expected == date(2024, 2, 5)
        assert note == "Reactivated 1x"


class TestAudit:
    """Tests for comparing stored and replayed due dates."""

    def test_matching_due_date(self, auditor):
        result = auditor.audit(
            date(2024, 2, 29), date(2024, 1, 31), 1, [PaymentEntry(payment_date=date(2024, 1, 31))]
        )
        assert result.is_correct is True
        assert result.expected_next_due == date(2024, 2, 29)

    def test_drifted_due_date(self, auditor):
        """Test a schedule that drifted to the payment date is flagged."""
        payments = [
            PaymentEntry(payment_date=date(2023, 11, 1)),
            PaymentEntry(payment_date=date(2023, 12, 7)),
        ]
        result = auditor.audit(date(2024, 1, 7), date(2023, 11, 1), 1, payments)
        assert result.is_correct is False
        assert result.expected_next_due == date(2024, 1, 1)
        assert result.stored_next_due == date(2024, 1, 7)


class TestEventsAppliedOnce:
    """Tests for history events that share a date with several payments."""

    def test_second_payment_on_shift_date_chains(self, auditor):
        """Test only the first payment on a shift date re-anchors; the next one extends it."""
        payments = [
            PaymentEntry(payment_date=date(2024, 1, 1)),
            PaymentEntry(payment_date=date(2024, 2, 10)),
            PaymentEntry(payment_date=date(2024, 2, 10)),
        ]
        events = [
            HistoryEvent(
                event_type=MembershipEventType.BASE_DATE_SHIFTED,
                event_date=date(2024, 2, 10),
                shift_to_date=date(2024, 2, 10),
            )
        ]
        expected, note = auditor.replay(date(2024, 1, 1), 1, payments, events)
        assert expected == date(2024, 4, 10)
        assert note == "3 payments"

    def test_every_reactivation_event_counted(self, auditor):
        """Test the note counts reactivations even without a new joining date."""
        payments = [
            PaymentEntry(payment_date=date(2023, 6, 1)),
            PaymentEntry(payment_date=date(2024, 1, 5)),
        ]
        events = [
            HistoryEvent(
                event_type=MembershipEventType.MEMBER_REACTIVATED,
                event_date=date(2023, 9, 1),
            ),
            HistoryEvent(
                event_type=MembershipEventType.MEMBER_REACTIVATED,
                event_date=date(2024, 1, 5),
                new_joining_date=date(2024, 1, 5),
            ),
        ]
        expected, note = auditor.replay(date(2023, 6, 1), 1, payments, events)
        assert expected == date(2024, 2, 5)
        assert note == "Reactivated 2x"
