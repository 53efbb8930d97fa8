"""
מעטפת האפליקציה בשורת הפקודה.

הרצה:
    school-client --email admin@school.uz --password ... pending-topups
    school-client --token $TOKEN wallet --type top-up
    school-client language ru

פרטי התחברות נלקחים גם מ-SCHOOL_CLIENT_EMAIL / SCHOOL_CLIENT_PASSWORD /
SCHOOL_CLIENT_TOKEN. פקיעת סשן (401) מדפיסה את מסך ההתחברות ויוצאת עם קוד 2.
"""
import argparse
import asyncio
import os
import sys
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import httpx

from school_client.api import ApiClient, SchoolApi, SessionExpiredEvent
from school_client.context import AuthContext, BranchContext, LanguageContext
from school_client.core.config import VALID_LANGUAGES, settings
from school_client.core.exceptions import AppException, user_message
from school_client.core.logging import (
    get_logger,
    log_async_operation,
    set_correlation_id,
    setup_logging,
)
from school_client.core.storage import DeviceStorage, SessionStorage
from school_client.domain.models import TopUpMethod
from school_client.panels import (
    AdminPayoutPanel,
    AdminWalletPanel,
    ConsoleNotifier,
    Notifier,
    StaffEarningsView,
    WalletDashboard,
)

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_SESSION_EXPIRED = 2

PUSH_USER_TYPES = ("student", "parent")


@dataclass
class App:
    """כל הקונטקסטים של ריצה אחת"""
    client: ApiClient
    api: SchoolApi
    session: SessionStorage
    auth: AuthContext
    language: LanguageContext
    branch: BranchContext
    notifier: Notifier
    device: Optional[DeviceStorage] = None
    session_expired: bool = field(default=False)

    def panel_kwargs(self) -> dict:
        return {
            "api": self.api,
            "auth": self.auth,
            "language": self.language,
            "notifier": self.notifier,
            "branch": self.branch,
        }

    def on_session_expired(self, event: SessionExpiredEvent) -> None:
        """ניווט למסך ההתחברות - ב-CLI: הודעה וקוד יציאה 2"""
        # בלי טוקן כבר נמצאים במסך ההתחברות (login שגוי)
        if self.session_expired or not event.had_token:
            return
        self.session_expired = True
        self.notifier.alert(f"{self.language.t('login.sessionExpired')} ({event.login_route})")


def build_app(
    notifier: Notifier,
    *,
    device: Optional[DeviceStorage] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    base_url: Optional[str] = None,
) -> App:
    session = SessionStorage()
    client = ApiClient(session, base_url, transport=transport)
    api = SchoolApi(client)
    auth = AuthContext(api, session)
    app = App(
        client=client,
        api=api,
        session=session,
        auth=auth,
        language=LanguageContext(device),
        branch=BranchContext(api, auth),
        notifier=notifier,
        device=device,
    )
    client.subscribe_session_expired(app.on_session_expired)
    return app


async def authenticate(app: App, args: argparse.Namespace) -> bool:
    if args.token:
        app.session.set_token(args.token)
        return await app.auth.restore() is not None

    if not (args.email and args.password):
        app.notifier.alert("Missing credentials: use --email/--password or --token")
        return False

    result = await app.auth.login(args.email, args.password, args.user_type)
    if not result.success:
        app.notifier.alert(result.message or app.language.t("login.failed"))
    return result.success


# ── פקודות ──

@log_async_operation("cli.login")
async def cmd_login(app: App, args: argparse.Namespace) -> int:
    user = app.auth.user or {}
    app.notifier.alert(f"{user.get('name')} ({app.auth.role})")
    await offer_push_notifications(app)
    return EXIT_OK


async def offer_push_notifications(app: App) -> bool:
    """
    הצעה חד-פעמית לתלמיד/הורה לקבל התראות במכשיר הזה.

    "לא" נשמר כתשובה ולא שואלים שוב. כישלון ברישום לא מסמן את הדגל,
    כך שההצעה תחזור בהתחברות הבאה.
    """
    user = app.auth.user or {}
    student_id = user.get("_id") or user.get("id")
    if app.device is None or not student_id or user.get("userType") not in PUSH_USER_TYPES:
        return False
    if app.device.was_push_prompt_shown(student_id):
        return False

    if not app.notifier.confirm(app.language.t("notifications.enablePrompt")):
        app.device.mark_push_prompt_shown(student_id)
        return False

    try:
        await app.api.students.register_push_token(student_id, app.device.device_id())
        await app.api.students.update_notification_settings(student_id, {"enable": True})
    except AppException as exc:
        logger.warning(
            "רישום להתראות נכשל",
            extra_data={"student_id": student_id, "error": exc.message},
        )
        app.notifier.alert(user_message(exc, app.language.t))
        return False

    app.device.mark_push_prompt_shown(student_id)
    logger.info("התראות הופעלו למכשיר", extra_data={"student_id": student_id})
    app.notifier.alert(app.language.t("notifications.enabled"))
    return True


@log_async_operation("cli.wallet")
async def cmd_wallet(app: App, args: argparse.Namespace) -> int:
    dashboard = WalletDashboard(**app.panel_kwargs())
    try:
        await dashboard.load()
        dashboard.set_filters(args.date_from, args.date_to, args.type or "")
        for card in dashboard.summary_cards():
            line = f"{card.title}: {card.amount}"
            app.notifier.alert(f"{line}  [{card.badge}]" if card.badge else line)

        table = dashboard.history_table()
        if table.empty_message:
            app.notifier.alert(table.empty_message)
        for row in table.rows():
            app.notifier.alert(
                f"{row.date}  {row.type_label:<18} {row.amount:>18}  "
                f"{row.status_label:<12} {row.reason}  ({row.recorded_by})"
            )
        error = dashboard.wallet.error
        return EXIT_FAILED if error else EXIT_OK
    finally:
        await dashboard.close()


@log_async_operation("cli.topup")
async def cmd_topup(app: App, args: argparse.Namespace) -> int:
    dashboard = WalletDashboard(**app.panel_kwargs())
    try:
        if not dashboard.can_top_up:
            app.notifier.alert(app.language.t("access.denied"))
            return EXIT_FAILED

        form = dashboard.top_up_form
        form.set_payment_method(args.method)
        if args.note:
            form.set_reason(args.note)
        form.set_amount(args.amount)
        preview = form.preview()

        request = form.submit()
        if request is None:
            app.notifier.alert(form.error)
            return EXIT_FAILED

        if preview:
            app.notifier.alert(preview)
        if not await dashboard.handle_top_up(request):
            app.notifier.alert(dashboard.top_up_error or app.language.t("common.error"))
            return EXIT_FAILED
        app.notifier.alert(app.language.t("wallet.topUpRequested"))
        app.notifier.alert(app.language.t("paymentTopUp.pendingConfirmation"))
        app.notifier.alert(form.daily_limit_hint())
        return EXIT_OK
    finally:
        await dashboard.close()


@log_async_operation("cli.pending_topups")
async def cmd_pending_topups(app: App, args: argparse.Namespace) -> int:
    panel = AdminWalletPanel(**app.panel_kwargs())
    try:
        await panel.fetch_pending_top_ups()
        rows = panel.pending_rows()
        if not rows:
            app.notifier.alert(app.language.t("walletAdmin.noPending"))
        for row in rows:
            app.notifier.alert(
                f"{row['id']}  {row['amount']:>18}  {row['payment_method'] or '-':<14} {row['reason']}"
            )
        return EXIT_OK
    finally:
        await panel.close()


@log_async_operation("cli.confirm_topup")
async def cmd_confirm_topup(app: App, args: argparse.Namespace) -> int:
    panel = AdminWalletPanel(**app.panel_kwargs())
    try:
        return EXIT_OK if await panel.confirm_top_up(args.transaction_id) else EXIT_FAILED
    finally:
        await panel.close()


@log_async_operation("cli.reject_topup")
async def cmd_reject_topup(app: App, args: argparse.Namespace) -> int:
    panel = AdminWalletPanel(**app.panel_kwargs())
    try:
        return EXIT_OK if await panel.reject_top_up(args.transaction_id) else EXIT_FAILED
    finally:
        await panel.close()


@log_async_operation("cli.earnings")
async def cmd_earnings(app: App, args: argparse.Namespace) -> int:
    view = StaffEarningsView(**app.panel_kwargs())
    try:
        view.set_filter(args.status)
        view.set_date_range(args.date_from, args.date_to)
        await view.fetch()
        for title, amount in view.account_cards().items():
            app.notifier.alert(f"{title}: {amount}")
        rows = view.rows()
        if not rows:
            app.notifier.alert(app.language.t("staffEarnings.noEarnings"))
        for row in rows:
            app.notifier.alert(
                f"{row.reference_date}  {row.icon} {row.type_label:<12} {row.amount:>24}  "
                f"{row.status_label:<10} {row.description}"
            )
        return EXIT_OK
    finally:
        await view.close()


@log_async_operation("cli.payouts")
async def cmd_payouts(app: App, args: argparse.Namespace) -> int:
    panel = AdminPayoutPanel(**app.panel_kwargs())
    try:
        await panel.load()
        for row in panel.history_rows():
            app.notifier.alert(
                f"{row['payout_id'] or row['id']}  {row['staff']:<20} {row['amount']:>18}  "
                f"{row['method']:<16} {row['status']}"
            )
        return EXIT_OK
    finally:
        await panel.close()


COMMANDS = {
    "login": cmd_login,
    "wallet": cmd_wallet,
    "topup": cmd_topup,
    "pending-topups": cmd_pending_topups,
    "confirm-topup": cmd_confirm_topup,
    "reject-topup": cmd_reject_topup,
    "earnings": cmd_earnings,
    "payouts": cmd_payouts,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="school-client",
        description="לקוח שורת פקודה לארנק, הכנסות צוות ותשלומי שכר",
    )
    parser.add_argument("--email", default=os.environ.get("SCHOOL_CLIENT_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("SCHOOL_CLIENT_PASSWORD"))
    parser.add_argument("--token", default=os.environ.get("SCHOOL_CLIENT_TOKEN"))
    parser.add_argument(
        "--user-type",
        choices=["teacher", "student", "parent"],
        default="teacher",
    )
    parser.add_argument("--branch", help="מזהה סניף (ברירת מחדל: כל הסניפים)")
    parser.add_argument("--yes", "-y", action="store_true", help="אישור אוטומטי לשאלות")
    parser.add_argument("--reason", help="סיבה (לדחייה) במקום שאלה אינטראקטיבית")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="בדיקת התחברות")

    wallet = sub.add_parser("wallet", help="סיכום ארנק והיסטוריית תנועות")
    wallet.add_argument("--type", default="", help="סינון לפי סוג תנועה")
    wallet.add_argument("--from", dest="date_from", type=date.fromisoformat)
    wallet.add_argument("--to", dest="date_to", type=date.fromisoformat)

    topup = sub.add_parser("topup", help="בקשת טעינת ארנק")
    topup.add_argument("amount", help="סכום ב-so'm")
    topup.add_argument(
        "--method",
        choices=[method.value for method in TopUpMethod],
        default=TopUpMethod.CASH.value,
    )
    topup.add_argument("--note", help="הערה לבקשה")

    sub.add_parser("pending-topups", help="טעינות ממתינות לאישור")

    confirm = sub.add_parser("confirm-topup", help="אישור טעינה")
    confirm.add_argument("transaction_id")

    reject = sub.add_parser("reject-topup", help="דחיית טעינה")
    reject.add_argument("transaction_id")

    earnings = sub.add_parser("earnings", help="ההכנסות שלי")
    earnings.add_argument(
        "--status", choices=["all", "pending", "approved", "paid"], default="all"
    )
    earnings.add_argument("--from", dest="date_from", type=date.fromisoformat)
    earnings.add_argument("--to", dest="date_to", type=date.fromisoformat)

    sub.add_parser("payouts", help="היסטוריית תשלומי שכר")

    language = sub.add_parser("language", help="שינוי שפת הממשק")
    language.add_argument("language", choices=sorted(VALID_LANGUAGES))

    return parser


async def run(app: App, args: argparse.Namespace) -> int:
    set_correlation_id()

    try:
        if args.command == "language":
            if not app.language.change_language(args.language):
                return EXIT_FAILED
            app.notifier.alert(app.language.t("common.success"))
            return EXIT_OK
        if not await authenticate(app, args):
            return EXIT_SESSION_EXPIRED if app.session_expired else EXIT_FAILED
        if args.branch:
            app.branch.select_branch(args.branch)
        code = await COMMANDS[args.command](app, args)
    except AppException as exc:
        if not app.session_expired:
            app.notifier.alert(user_message(exc, app.language.t))
        code = EXIT_FAILED
    finally:
        await app.client.aclose()

    return EXIT_SESSION_EXPIRED if app.session_expired else code


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    read = input
    if args.reason:
        reason = args.reason
        read = lambda _message: reason  # noqa: E731
    notifier = ConsoleNotifier(assume_yes=args.yes, read=read)
    app = build_app(notifier, device=DeviceStorage(settings.DEVICE_STORAGE_PATH))

    sys.exit(asyncio.run(run(app, args)))


if __name__ == "__main__":
    main()
