"""
Tests for staff earnings: teacher view and admin approval/manual actions
"""
from datetime import date

import pytest

from school_client.core.exceptions import AccessDeniedError
from school_client.panels import AdminEarningsPanel, StaffEarningsView


@pytest.fixture
async def teacher_view(panel_kwargs, login):
    await login("teacher@school.uz")
    view = StaffEarningsView(**panel_kwargs)
    yield view
    await view.close()


@pytest.fixture
def earnings_panel(panel_kwargs, login):
    async def _panel(email: str = "founder@school.uz") -> AdminEarningsPanel:
        await login(email)
        return AdminEarningsPanel(**panel_kwargs)

    return _panel


class TestStaffEarningsView:
    """ההכנסות של המורה המחובר - קריאה בלבד"""

    @pytest.mark.integration
    async def test_account_cards(self, teacher_view):
        await teacher_view.fetch()

        assert teacher_view.account_cards() == {
            "total_earned": "150 000 so'm",
            "available_for_payout": "150 000 so'm",
            "pending_earnings": "150 000 so'm",
            "total_paid_out": "0 so'm",
        }

    @pytest.mark.integration
    async def test_deduction_row_shows_absolute_amount(self, teacher_view):
        await teacher_view.fetch()

        rows = {row.type_label: row for row in teacher_view.rows()}
        penalty = rows["Penalty"]
        assert penalty.amount == "50 000 so'm (deduction)"
        assert penalty.is_deduction is True
        assert penalty.icon == "⚠️"
        assert penalty.status_label == "Approved"
        assert penalty.status_color == "#28a745"
        assert penalty.description == "Late for class"
        assert penalty.reference_date == "05.03.2024"

    @pytest.mark.integration
    async def test_status_filter_is_sent_to_server(self, teacher_view, backend):
        teacher_view.set_filter("pending")

        await teacher_view.fetch()

        assert backend.query("/staff-earnings")["status"] == "pending"
        assert [row.type_label for row in teacher_view.rows()] == ["Per class"]

    @pytest.mark.integration
    async def test_all_filter_sends_no_status(self, teacher_view, backend):
        teacher_view.set_date_range(date(2024, 3, 1), date(2024, 3, 31))

        await teacher_view.fetch()

        query = backend.query("/staff-earnings")
        assert "status" not in query
        assert query["startDate"] == "2024-03-01"
        assert query["endDate"] == "2024-03-31"

    @pytest.mark.unit
    def test_unknown_filter(self, panel_kwargs):
        view = StaffEarningsView(**panel_kwargs)
        with pytest.raises(ValueError):
            view.set_filter("rejected")

    @pytest.mark.integration
    async def test_failure_is_alerted(self, teacher_view, backend, notifier):
        backend.fail("GET", "/staff-earnings", 500, "Earnings service down")

        await teacher_view.fetch()

        assert notifier.alerts == ["Earnings service down"]
        assert teacher_view.loading is False
        assert teacher_view.earnings == []


class TestAdminEarningsPanel:
    """אישור הכנסות ובונוס/קנס/התאמה"""

    @pytest.mark.integration
    async def test_pending_list_follows_branch(self, earnings_panel):
        panel = await earnings_panel("admin@school.uz")

        await panel.load()

        assert [e.id for e in panel.pending_earnings] == ["e1"]
        assert [t["_id"] for t in panel.teachers] == ["t1"]

    @pytest.mark.integration
    async def test_founder_sees_every_branch(self, earnings_panel):
        panel = await earnings_panel()

        await panel.load()

        assert [e.id for e in panel.pending_earnings] == ["e1", "e4"]
        assert panel.pending_rows()[1].icon == "⏰"

    @pytest.mark.integration
    async def test_approve(self, earnings_panel, backend, notifier):
        panel = await earnings_panel("manager@school.uz")

        assert await panel.approve("e4") is True

        assert backend.earnings[3]["status"] == "approved"
        assert notifier.alerts == ["Earning approved"]
        assert panel.pending_earnings == []

    @pytest.mark.integration
    async def test_declined_approval_makes_no_call(self, earnings_panel, backend, notifier):
        notifier.confirm_answer = False
        panel = await earnings_panel()

        assert await panel.approve("e1") is False
        assert backend.called("PATCH", "/staff-earnings/e1/approve") == 0

    @pytest.mark.integration
    async def test_approving_twice_shows_server_message(self, earnings_panel, notifier):
        panel = await earnings_panel()

        await panel.approve("e1")
        assert await panel.approve("e1") is False

        assert notifier.alerts[-1] == "Earning is not pending"

    @pytest.mark.integration
    async def test_bonus_sends_tyiyn(self, earnings_panel, backend, notifier):
        panel = await earnings_panel()

        ok = await panel.submit_action("bonus", "t2", "100000", "Olympiad coaching")

        assert ok is True
        assert backend.body("POST", "/staff-earnings/bonus") == {
            "staffId": "t2",
            "amount": 10_000_000,
            "reason": "Olympiad coaching",
        }
        assert notifier.alerts == ["Bonus applied successfully"]

    @pytest.mark.integration
    async def test_adjustment_direction(self, earnings_panel, backend):
        panel = await earnings_panel()

        await panel.submit_action("adjustment", "t1", "2500", "Overpaid last month", direction="debit")

        body = backend.body("POST", "/staff-earnings/adjustment")
        assert body["direction"] == "debit"
        assert body["amount"] == 250_000
        assert backend.earnings[-1]["amount"] == -250_000

    @pytest.mark.integration
    async def test_penalty_reason_needs_ten_characters(self, earnings_panel, backend, notifier):
        panel = await earnings_panel()

        assert await panel.submit_action("penalty", "t1", "1000", "Late") is False

        assert notifier.alerts == ["Reason must be at least 10 characters"]
        assert backend.called("POST", "/staff-earnings/penalty") == 0

    @pytest.mark.integration
    async def test_teacher_is_required(self, earnings_panel, notifier):
        panel = await earnings_panel()

        assert await panel.submit_action("bonus", "", "1000", "Olympiad coaching") is False
        assert notifier.alerts == ["Please choose a teacher"]

    @pytest.mark.integration
    async def test_manager_can_approve_but_not_apply_bonus(self, earnings_panel):
        panel = await earnings_panel("manager@school.uz")

        assert panel.can_approve is True
        assert panel.has_admin_access is False
        with pytest.raises(AccessDeniedError):
            await panel.submit_action("bonus", "t2", "1000", "Olympiad coaching")

    @pytest.mark.integration
    async def test_all_tab_is_refreshed_after_action(self, earnings_panel, backend):
        panel = await earnings_panel()
        panel.active_tab = "all"
        await panel.load()

        await panel.submit_action("bonus", "t1", "1000", "Olympiad coaching")

        assert backend.called("GET", "/staff-earnings") == 2
        assert len(panel.all_earnings) == len(backend.earnings)
