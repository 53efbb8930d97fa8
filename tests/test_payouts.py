"""
Tests for the admin salary payout panel
"""
from datetime import date

import pytest

from school_client.core.exceptions import AccessDeniedError
from school_client.panels import AdminPayoutPanel
from school_client.panels.payouts import PayoutForm


@pytest.fixture
def payout_panel(panel_kwargs, login):
    async def _panel(email: str = "founder@school.uz") -> AdminPayoutPanel:
        await login(email)
        panel = AdminPayoutPanel(**panel_kwargs)
        await panel.load()
        return panel

    return _panel


class TestCreatePayout:
    """רישום תשלום: ולידציה, אישור ושליחה ב-tyiyn"""

    @pytest.mark.integration
    async def test_cash_payout(self, payout_panel, backend, notifier):
        panel = await payout_panel()
        form = PayoutForm(teacher_id="t1", amount="100000", payment_date=date(2024, 3, 31), notes="March")

        assert await panel.create_payout(form) is True

        assert notifier.confirms == ["Record a payment of 100 000 so'm to Dilnoza?"]
        body = backend.body("POST", "/salary-payouts")
        assert body == {
            "staffId": "t1",
            "amount": 10_000_000,
            "method": "cash",
            "paymentDate": "2024-03-31",
            "notes": "March",
        }
        assert notifier.alerts == ["Payment recorded"]
        assert panel.active_tab == "history"
        assert [p.payout_id for p in panel.payouts] == ["PAY-0001"]

    @pytest.mark.integration
    async def test_bank_details_only_for_bank_transfer(self, payout_panel, backend):
        panel = await payout_panel()
        form = PayoutForm(
            teacher_id="t2",
            amount="250000",
            method="bank-transfer",
            account_number="20208000900111222001",
            account_name="Bekzod T.",
            bank_name="Kapitalbank",
        )

        assert await panel.create_payout(form) is True

        assert backend.body("POST", "/salary-payouts")["bankDetails"] == {
            "accountNumber": "20208000900111222001",
            "accountName": "Bekzod T.",
            "bankName": "Kapitalbank",
        }

    @pytest.mark.integration
    async def test_cash_form_drops_typed_bank_fields(self, payout_panel, backend):
        panel = await payout_panel()
        form = PayoutForm(teacher_id="t1", amount="1000", account_number="123")

        await panel.create_payout(form)

        assert "bankDetails" not in backend.body("POST", "/salary-payouts")

    @pytest.mark.integration
    @pytest.mark.parametrize(
        "form,expected",
        [
            (PayoutForm(teacher_id="", amount="1000"), "Please choose a teacher"),
            (PayoutForm(teacher_id="t1", amount="-5"), "Please enter a valid amount"),
            (
                PayoutForm(teacher_id="t1", amount="1000", method="bank-transfer"),
                "Bank account number is required for bank transfers",
            ),
        ],
    )
    async def test_invalid_form_makes_no_call(self, payout_panel, backend, notifier, form, expected):
        panel = await payout_panel()

        assert await panel.create_payout(form) is False

        assert notifier.alerts == [expected]
        assert notifier.confirms == []
        assert backend.called("POST", "/salary-payouts") == 0

    @pytest.mark.integration
    async def test_declined_confirmation(self, payout_panel, backend, notifier):
        notifier.confirm_answer = False
        panel = await payout_panel()

        assert await panel.create_payout(PayoutForm(teacher_id="t1", amount="1000")) is False

        assert backend.payouts == []
        assert panel.active_tab == "create"

    @pytest.mark.integration
    async def test_server_error_is_alerted(self, payout_panel, backend, notifier):
        backend.fail("POST", "/salary-payouts", 500, "Payroll service unavailable")
        panel = await payout_panel()

        assert await panel.create_payout(PayoutForm(teacher_id="t1", amount="1000")) is False

        assert notifier.alerts == ["Payroll service unavailable"]
        assert panel.active_tab == "create"


class TestPayoutLifecycle:
    """pending -> completed / cancelled"""

    @pytest.mark.integration
    async def test_complete(self, payout_panel, backend, notifier):
        payout = backend.add_payout("t1", amount=5_000_000)
        panel = await payout_panel("manager@school.uz")

        assert await panel.complete_payout(payout["_id"]) is True

        assert payout["status"] == "completed"
        assert notifier.alerts == ["Payout completed"]
        assert panel.history_rows()[0]["can_complete"] is False

    @pytest.mark.integration
    async def test_view_closed_while_completing(self, payout_panel, backend, notifier, monkeypatch):
        payout = backend.add_payout("t1", amount=5_000_000)
        panel = await payout_panel()
        complete = panel.api.salary_payouts.complete_payout

        async def _complete_then_close(payout_id):
            result = await complete(payout_id)
            await panel.close()
            return result

        monkeypatch.setattr(panel.api.salary_payouts, "complete_payout", _complete_then_close)

        assert await panel.complete_payout(payout["_id"]) is True

        assert payout["status"] == "completed"
        assert notifier.alerts == ["Payout completed"]
        # הרשימה נשארת כפי שנטענה לפני הסגירה
        assert panel.payouts[0].status == "pending"

    @pytest.mark.integration
    async def test_completing_twice_shows_server_message(self, payout_panel, backend, notifier):
        payout = backend.add_payout("t1", amount=5_000_000, status="completed")
        panel = await payout_panel()

        assert await panel.complete_payout(payout["_id"]) is False
        assert notifier.alerts == ["Payout is not pending"]

    @pytest.mark.integration
    async def test_cancel_with_reason(self, payout_panel, backend, notifier):
        payout = backend.add_payout("t2", amount=5_000_000)
        notifier.prompt_answers = ["  Paid twice by mistake  "]
        panel = await payout_panel()

        assert await panel.cancel_payout(payout["_id"]) is True

        assert backend.body("PATCH", f"/salary-payouts/{payout['_id']}/cancel") == {
            "reason": "Paid twice by mistake"
        }
        assert payout["status"] == "cancelled"
        assert notifier.alerts == ["Payout cancelled"]

    @pytest.mark.integration
    async def test_dismissed_prompt_makes_no_call(self, payout_panel, backend):
        payout = backend.add_payout("t1", amount=5_000_000)
        panel = await payout_panel()

        assert await panel.cancel_payout(payout["_id"]) is False

        assert backend.called("PATCH", f"/salary-payouts/{payout['_id']}/cancel") == 0

    @pytest.mark.integration
    async def test_short_cancel_reason(self, payout_panel, backend, notifier):
        payout = backend.add_payout("t1", amount=5_000_000)
        notifier.prompt_answers = ["Mistake"]
        panel = await payout_panel()

        assert await panel.cancel_payout(payout["_id"]) is False

        assert notifier.alerts == ["Reason must be at least 10 characters"]
        assert payout["status"] == "pending"


class TestPayoutHistory:
    """היסטוריה ובקרת גישה"""

    @pytest.mark.integration
    async def test_history_rows(self, payout_panel, backend):
        backend.add_payout("t1", amount=5_000_000, method="uzcard", status="completed")
        backend.add_payout("t2", amount=1_250_050)
        panel = await payout_panel()

        rows = panel.history_rows()

        assert [row["payout_id"] for row in rows] == ["PAY-0002", "PAY-0001"]
        assert rows[0]["staff"] == "Bekzod"
        assert rows[0]["amount"] == "12 501 so'm"
        assert rows[0]["status_color"] == "#FFA500"
        assert rows[0]["can_cancel"] is True
        assert rows[1]["method"] == "Uzcard"
        assert rows[1]["status"] == "Completed"
        assert rows[1]["status_color"] == "#28a745"

    @pytest.mark.integration
    async def test_teacher_has_no_access(self, panel_kwargs, login, backend):
        await login("teacher@school.uz")
        panel = AdminPayoutPanel(**panel_kwargs)

        assert panel.has_access is False
        with pytest.raises(AccessDeniedError):
            await panel.load()
        assert backend.called("GET", "/salary-payouts") == 0

    @pytest.mark.integration
    async def test_history_failure_keeps_previous_list(self, payout_panel, backend):
        backend.add_payout("t1", amount=5_000_000)
        panel = await payout_panel()
        backend.fail("GET", "/salary-payouts", 500, "DB down")

        await panel.fetch_payout_history()

        assert len(panel.payouts) == 1
        assert panel.loading is False
