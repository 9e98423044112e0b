"""Tests for the retainer ledger: consumption, alerts, waivers and rollover."""

from datetime import date
from uuid import uuid4

import pytest

from caseflow.config import AlertType
from caseflow.core import InvalidStateException, ResourceNotFoundException, ValidationException
from caseflow.retainer.domain import (
    Retainer,
    UsageCalculator,
    billing_period_start,
    next_period_start,
    previous_period_start,
)

MARCH = date(2024, 3, 1)
APRIL = date(2024, 4, 1)


@pytest.fixture
def configure(ledger, company_id):
    async def _configure(**overrides):
        payload = {
            "company_id": company_id,
            "period": MARCH,
            "retainer_hours": 40,
            "rollover_bank": 5,
            "overage_rate": 150,
            "max_rollover_hours": 10,
        }
        payload.update(overrides)
        return await ledger.configure(payload)
    return _configure


@pytest.fixture
def post(ledger, company_id):
    async def _post(hours, **overrides):
        payload = {
            "company_id": company_id,
            "hours_logged": hours,
            "service_date": date(2024, 3, 5),
            "description": "Payroll reconciliation",
            "consultant_id": "consultant-1",
        }
        payload.update(overrides)
        return await ledger.post_service_entry(payload)
    return _post


class TestPeriods:
    """Calendar-month billing periods."""

    def test_period_helpers(self) -> None:
        assert billing_period_start(date(2024, 3, 17)) == MARCH
        assert next_period_start(date(2024, 12, 9)) == date(2025, 1, 1)
        assert previous_period_start(date(2024, 1, 1)) == date(2023, 12, 1)

    def test_retainer_rejects_mid_month_period(self) -> None:
        with pytest.raises(ValueError):
            Retainer(company_id=uuid4(), period_start=date(2024, 3, 2), retainer_hours=10)

    def test_derived_figures(self) -> None:
        retainer = Retainer(
            company_id=uuid4(), period_start=MARCH, retainer_hours=40,
            rollover_bank=5, hours_used=46, overage_rate=150, max_rollover_hours=10,
        )
        assert retainer.effective_available == 45
        assert retainer.overage_hours == 1
        assert retainer.overage_charge == 150
        assert retainer.remaining_hours == 0
        assert retainer.carry_forward() == 0

    def test_threshold_crossings(self) -> None:
        assert UsageCalculator.crossed_thresholds(20, 40, 45, [75, 90]) == [75]
        assert UsageCalculator.crossed_thresholds(40, 46, 45, [75, 90]) == [90]
        assert UsageCalculator.crossed_thresholds(41, 44, 45, [75, 90]) == []
        assert UsageCalculator.crossed_into_overage(40, 46, 45)
        assert not UsageCalculator.crossed_into_overage(46, 50, 45)


class TestConsumption:
    """Posting billable hours against a 40h + 5h rollover retainer."""

    async def test_overage_and_threshold_alerts(self, configure, post, dispatcher, company_id) -> None:
        await configure()

        first = await post(20)
        assert first.consumed_hours == 20
        assert first.alerts == []

        second = await post(20)
        assert [a.payload["threshold"] for a in second.alerts] == [75]

        third = await post(6)
        assert third.retainer.hours_used == 46
        assert third.retainer.overage_hours == 1
        assert sorted(a.alert_type.value for a in third.alerts) == ["retainer_overage", "retainer_threshold"]

        # Further overage never re-raises
        fourth = await post(2)
        assert fourth.alerts == []

        alerts = await dispatcher.list_alerts(company_id=company_id)
        assert len([a for a in alerts if a.alert_type == AlertType.RETAINER_OVERAGE]) == 1
        thresholds = sorted(
            a.payload["threshold"] for a in alerts if a.alert_type == AlertType.RETAINER_THRESHOLD
        )
        assert thresholds == [75, 90]

    async def test_case_actual_hours_follow_billable_entries(self, configure, post, case_service, case_payload) -> None:
        await configure()
        case = await case_service.create(case_payload())

        await post(1.5, case_id=case.id)
        await post(2, case_id=case.id, billable=False)

        assert (await case_service.require(case.id)).actual_hours == 1.5

    async def test_non_billable_entry_consumes_nothing(self, configure, post) -> None:
        await configure()
        result = await post(3, billable=False)
        assert result.consumed_hours == 0
        assert result.retainer is None

    async def test_no_active_retainer_records_entry(self, post, ledger, company_id) -> None:
        result = await post(4)
        assert result.consumed_hours == 0
        assert result.entry.id is not None

        with pytest.raises(ResourceNotFoundException):
            await ledger.get_retainer(company_id, MARCH)

    async def test_first_posting_in_new_month_opens_period(self, configure, post, ledger, company_id) -> None:
        await configure(rollover_bank=0)
        await post(30)

        result = await post(6, service_date=APRIL)

        assert result.consumed_hours == 6
        assert result.entry.consumed_hours == 6
        assert result.retainer.period_start == APRIL
        assert result.retainer.hours_used == 6
        assert result.retainer.rollover_bank == 10

        # The scheduled rollover that runs later keeps the posted hours
        rollover = await ledger.rollover_period(company_id, APRIL)
        assert rollover.applied is False
        assert rollover.retainer.hours_used == 6
        assert rollover.retainer.rollover_bank == 10

    async def test_inactive_previous_period_does_not_open_next(self, configure, post, ledger, company_id) -> None:
        await configure(is_active=False)
        result = await post(6, service_date=APRIL)

        assert result.consumed_hours == 0
        with pytest.raises(ResourceNotFoundException):
            await ledger.get_retainer(company_id, APRIL)

    async def test_inactive_retainer_is_not_consumed(self, configure, post) -> None:
        await configure(is_active=False)
        result = await post(4)
        assert result.consumed_hours == 0

    async def test_case_from_another_company_rejected(self, configure, post, case_service, case_payload) -> None:
        await configure()
        case = await case_service.create(case_payload(company_id=uuid4()))

        with pytest.raises(ValidationException):
            await post(2, case_id=case.id)

    async def test_unknown_case_rejected(self, post) -> None:
        with pytest.raises(ResourceNotFoundException):
            await post(2, case_id=uuid4())

    @pytest.mark.parametrize("hours", [0, -1])
    async def test_non_positive_hours_rejected(self, post, hours) -> None:
        with pytest.raises(ValidationException):
            await post(hours)

    async def test_empty_description_rejected(self, post) -> None:
        with pytest.raises(ValidationException):
            await post(1, description="   ")

    async def test_configure_updates_contract_not_usage(self, configure, post) -> None:
        await configure()
        await post(10)
        updated = await configure(retainer_hours=60, period=date(2024, 3, 20))

        assert updated.period_start == MARCH
        assert updated.retainer_hours == 60
        assert updated.hours_used == 10


class TestWaive:
    """Waivers give hours back to the period."""

    async def test_waive_releases_hours(self, configure, post, ledger, case_service, case_payload) -> None:
        await configure()
        case = await case_service.create(case_payload())
        posted = await post(5, case_id=case.id)

        result = await ledger.waive(posted.entry.id, "Goodwill", actor="manager")

        assert result.released_hours == 5
        assert result.retainer.hours_used == 0
        assert result.entry.billable is False
        assert result.entry.waived_by == "manager"
        # Work performed is still recorded on the case
        assert (await case_service.require(case.id)).actual_hours == 5

    async def test_waive_unconsumed_entry_releases_nothing(self, configure, post, ledger, company_id) -> None:
        unconsumed = await post(8)
        assert unconsumed.entry.consumed_hours == 0
        await configure()
        await post(10)

        result = await ledger.waive(unconsumed.entry.id, "Posted before the contract")

        assert result.released_hours == 0
        assert result.entry.billable is False
        assert (await ledger.get_retainer(company_id, MARCH)).hours_used == 10

    async def test_waive_twice_rejected(self, configure, post, ledger) -> None:
        await configure()
        posted = await post(5)
        await ledger.waive(posted.entry.id, "Goodwill")

        with pytest.raises(InvalidStateException):
            await ledger.waive(posted.entry.id, "Again")

    async def test_waive_requires_reason(self, configure, post, ledger) -> None:
        await configure()
        posted = await post(5)

        with pytest.raises(ValidationException):
            await ledger.waive(posted.entry.id, "")

    async def test_waive_unknown_entry(self, ledger) -> None:
        with pytest.raises(ResourceNotFoundException):
            await ledger.waive(uuid4(), "Goodwill")


class TestRollover:
    """Unused hours carry into the next period, capped and applied once."""

    async def test_carry_capped_and_idempotent(self, configure, post, ledger, company_id) -> None:
        await configure(rollover_bank=0)
        await post(30)

        first = await ledger.rollover_period(company_id, APRIL)
        assert first.applied is True
        assert first.carried_hours == 10
        assert first.retainer.effective_available == 50
        assert first.retainer.hours_used == 0

        second = await ledger.rollover_period(company_id, APRIL)
        assert second.applied is False
        assert second.retainer.rollover_bank == 10

    async def test_overused_period_carries_nothing(self, configure, post, ledger, company_id) -> None:
        await configure()
        await post(46)

        result = await ledger.rollover_period(company_id, APRIL)
        assert result.carried_hours == 0

    async def test_configured_bank_kept_by_rollover(self, configure, ledger, company_id) -> None:
        await configure(period=date(2024, 2, 1))
        configured = await configure(rollover_bank=3)
        assert configured.rollover_applied_at is not None

        result = await ledger.rollover_period(company_id, MARCH)

        assert result.applied is False
        assert result.retainer.rollover_bank == 3

    async def test_missing_previous_period(self, ledger, company_id) -> None:
        with pytest.raises(ResourceNotFoundException):
            await ledger.rollover_period(company_id, APRIL)

    async def test_rollover_all_active(self, configure, ledger, company_id) -> None:
        other = uuid4()
        await configure()
        await configure(company_id=other)
        await configure(company_id=uuid4(), is_active=False)

        results = await ledger.rollover_all(date(2024, 4, 15))

        assert {r.company_id for r in results} == {company_id, other}
        assert all(r.applied for r in results)
        assert all(r.carried_hours == 10 for r in results)


class TestUsageSummary:
    """Monthly report."""

    async def test_summary_breakdown(self, configure, post, ledger, company_id, case_service, case_payload) -> None:
        await configure()
        case = await case_service.create(case_payload())
        await post(4, case_id=case.id, service_type="payroll")
        await post(2, service_type="advisory")
        await post(1, billable=False)
        waived = await post(3)
        await ledger.waive(waived.entry.id, "Duplicate entry")
        # Next month is not part of the report
        await post(5, service_date=date(2024, 4, 2))

        summary = await ledger.usage_summary(company_id, MARCH)

        assert summary.entry_count == 4
        assert summary.total_hours_logged == 10
        assert summary.billable_hours == 6
        assert summary.non_billable_hours == 1
        assert summary.waived_hours == 3
        assert summary.hours_by_source == {"case": 4, "general": 6}
        assert summary.hours_by_service_type["payroll"] == 4
        assert summary.retainer.hours_used == 6
