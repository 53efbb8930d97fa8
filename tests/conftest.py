"""
Pytest configuration and fixtures.

ה-backend המזויף הוא אפליקציית FastAPI עם מצב בזיכרון, מחוברת ללקוח דרך
httpx.ASGITransport - אותו מסלול HTTP אמיתי, בלי רשת.
"""
import itertools
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import pytest
from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from school_client.api import ApiClient, SchoolApi
from school_client.context import AuthContext, BranchContext, LanguageContext
from school_client.core.storage import SessionStorage
from school_client.panels.notifier import Notifier

BASE_URL = "http://test/api"
PASSWORD = "secret"

USERS = [
    {"id": "adm1", "name": "Admin", "email": "admin@school.uz", "role": "admin",
     "userType": "teacher", "branchId": "b1"},
    {"id": "fnd1", "name": "Founder", "email": "founder@school.uz", "role": "founder",
     "userType": "teacher"},
    {"id": "mgr1", "name": "Manager", "email": "manager@school.uz", "role": "manager",
     "userType": "teacher", "branchId": "b2"},
    {"id": "rcp1", "name": "Reception", "email": "reception@school.uz", "role": "receptionist",
     "userType": "teacher", "branchId": "b1"},
    {"id": "t1", "name": "Dilnoza", "email": "teacher@school.uz", "role": "teacher",
     "userType": "teacher", "branchId": "b1"},
    {"id": "stu1", "name": "Aziz", "email": "student@school.uz", "studentId": "S-001",
     "userType": "student", "branchId": "b1"},
]

STUDENTS = [
    {"_id": "stu1", "name": "Aziz", "studentId": "S-001", "branchId": "b1"},
    {"_id": "stu2", "name": "Malika", "studentId": "S-002", "branchId": "b2"},
    {"_id": "stu3", "name": "Jasur", "studentId": "S-003", "branchId": "b1"},
]

TEACHERS = [
    {"_id": "t1", "name": "Dilnoza", "branchId": "b1"},
    {"_id": "t2", "name": "Bekzod", "branchId": "b2"},
]

BRANCHES = [
    {"_id": "b1", "name": "Chilonzor", "isActive": True},
    {"_id": "b2", "name": "Yunusobod", "isActive": True},
    {"_id": "b3", "name": "Sergeli", "isActive": False},
]

EARNINGS = [
    {"_id": "e1", "staffId": "t1", "earningType": "per-class", "amount": 15000000,
     "status": "pending", "description": "Math 7A", "referenceDate": "2024-03-04T00:00:00Z",
     "branchId": "b1"},
    {"_id": "e2", "staffId": "t1", "earningType": "penalty", "amount": -5000000,
     "status": "approved", "reason": "Late for class", "referenceDate": "2024-03-05T00:00:00Z",
     "branchId": "b1"},
    {"_id": "e3", "staffId": "t1", "earningType": "bonus", "amount": 20000000,
     "status": "paid", "reason": "Olympiad results", "referenceDate": "2024-02-20T00:00:00Z",
     "branchId": "b1"},
    {"_id": "e4", "staffId": "t2", "earningType": "hourly", "amount": 9000000,
     "status": "pending", "description": "English club", "referenceDate": "2024-03-06T00:00:00Z",
     "branchId": "b2"},
]

# גבולות טעינה בצד השרת, ב-tyiyn
SERVER_TOPUP_MIN = 1_000_000
SERVER_TOPUP_MAX = 200_000_000


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ok(data: Any = None, **extra: Any) -> dict:
    return {"success": True, "data": data, **extra}


class FakeBackend:
    """שרת REST מזויף: משתמשים, ארנקים, הכנסות צוות ותשלומי שכר"""

    def __init__(self):
        self.users = {user["email"]: deepcopy(user) for user in USERS}
        self.tokens: dict[str, dict] = {}
        self.wallets = {
            "stu1": {"_id": "w1", "isLocked": False, "lockReason": None},
            "stu2": {"_id": "w2", "isLocked": False, "lockReason": None},
        }
        self.transactions: list[dict] = []
        self.earnings = deepcopy(EARNINGS)
        self.payouts: list[dict] = []
        self.calls: list[tuple[str, str]] = []
        self.queries: list[tuple[str, str, dict]] = []
        self.bodies: list[tuple[str, str, Any]] = []
        self.headers: list[dict] = []
        self.failures: dict[tuple[str, str], tuple[int, Optional[str]]] = {}
        self._ids = itertools.count(1)
        self.app = self._build_app()

    # ── עזרים לבדיקות ──

    def next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def fail(self, method: str, path: str, status_code: int = 500, message: Optional[str] = "Server error"):
        """הבקשה הבאה ל-method+path תיכשל עם status_code"""
        self.failures[(method, f"/api{path}")] = (status_code, message)

    def called(self, method: str, path: str) -> int:
        return self.calls.count((method, f"/api{path}"))

    def body(self, method: str, path: str) -> Any:
        for call_method, call_path, body in reversed(self.bodies):
            if (call_method, call_path) == (method, f"/api{path}"):
                return body
        raise AssertionError(f"no body recorded for {method} {path}")

    def query(self, path: str) -> dict:
        for method, call_path, params in reversed(self.queries):
            if call_path == f"/api{path}":
                return params
        raise AssertionError(f"no query recorded for {path}")

    def token_for(self, email: str) -> str:
        user = self.users[email]
        token = f"token-{user['id']}"
        self.tokens[token] = user
        return token

    def add_transaction(self, owner_id: str, **fields: Any) -> dict:
        wallet = self.wallets[owner_id]
        tx = {
            "_id": self.next_id("tx"),
            "walletId": wallet["_id"],
            "ownerId": owner_id,
            "transactionType": "top-up",
            "direction": "credit",
            "amount": 0,
            "status": "completed",
            "reason": None,
            "paymentMethod": None,
            "createdAt": _now(),
            "createdBy": None,
        }
        tx.update(fields)
        self.transactions.append(tx)
        return tx

    def add_payout(self, staff_id: str, **fields: Any) -> dict:
        teacher = next(t for t in TEACHERS if t["_id"] == staff_id)
        payout = {
            "_id": self.next_id("p"),
            "payoutId": f"PAY-{len(self.payouts) + 1:04d}",
            "staffId": {"_id": teacher["_id"], "name": teacher["name"]},
            "amount": 0,
            "method": "cash",
            "status": "pending",
            "notes": "",
            "createdAt": _now(),
        }
        payout.update(fields)
        self.payouts.append(payout)
        return payout

    def summary(self, owner_id: str) -> Optional[dict]:
        wallet = self.wallets.get(owner_id)
        if wallet is None:
            return None
        txs = [tx for tx in self.transactions if tx["walletId"] == wallet["_id"]]
        completed = [tx for tx in txs if tx["status"] == "completed"]
        available = sum(
            tx["amount"] if tx["direction"] == "credit" else -tx["amount"] for tx in completed
        )
        pending = sum(
            tx["amount"] for tx in txs if tx["status"] == "pending" and tx["direction"] == "credit"
        )
        stats: dict[str, dict] = {}
        for tx in completed:
            stat = stats.setdefault(
                tx["transactionType"], {"_id": tx["transactionType"], "total": 0, "count": 0}
            )
            stat["total"] += tx["amount"]
            stat["count"] += 1
        return {
            "walletId": wallet["_id"],
            "balance": available + pending,
            "availableBalance": available,
            "pendingBalance": pending,
            "currency": "UZS",
            "isLocked": wallet["isLocked"],
            "lockReason": wallet["lockReason"],
            "transactionStats": list(stats.values()),
        }

    # ── האפליקציה ──

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        backend = self

        @app.exception_handler(HTTPException)
        async def envelope_errors(request: Request, exc: HTTPException):
            return JSONResponse({"success": False, "message": exc.detail}, status_code=exc.status_code)

        @app.middleware("http")
        async def record_calls(request: Request, call_next):
            key = (request.method, request.url.path)
            backend.calls.append(key)
            backend.queries.append((request.method, request.url.path, dict(request.query_params)))
            backend.headers.append(dict(request.headers))
            failure = backend.failures.pop(key, None)
            if failure:
                status_code, message = failure
                body = {"success": False}
                if message:
                    body["message"] = message
                return JSONResponse(body, status_code=status_code)
            return await call_next(request)

        def record(request: Request, body: Any) -> None:
            backend.bodies.append((request.method, request.url.path, body))

        def current_user(authorization: Optional[str] = Header(default=None)) -> dict:
            token = (authorization or "").replace("Bearer ", "", 1).strip()
            user = backend.tokens.get(token)
            if user is None:
                raise HTTPException(401, "Not authorized, token failed")
            return user

        def require_role(user: dict, *roles: str) -> None:
            if user.get("role") not in roles:
                raise HTTPException(403, f"User role {user.get('role')} is not authorized")

        def find(items: list[dict], item_id: str, what: str) -> dict:
            for item in items:
                if item["_id"] == item_id:
                    return item
            raise HTTPException(404, f"{what} not found")

        # ── auth ──

        @app.post("/api/auth/{user_type}/login")
        async def login(user_type: str, request: Request, payload: dict = Body(...)):
            record(request, payload)
            user = backend.users.get(payload.get("email"))
            if user is None or payload.get("password") != PASSWORD:
                raise HTTPException(401, "Invalid credentials")
            token = backend.token_for(user["email"])
            return {"success": True, "token": token, "user": user}

        @app.get("/api/auth/me")
        async def me(user: dict = Depends(current_user)):
            return _ok(user)

        # ── רשימות ──

        def by_branch(items: list[dict], branch_id: Optional[str]) -> list[dict]:
            if not branch_id:
                return items
            return [item for item in items if item.get("branchId") == branch_id]

        @app.get("/api/students")
        async def students(branchId: Optional[str] = None, user: dict = Depends(current_user)):
            return _ok(by_branch(STUDENTS, branchId))

        @app.post("/api/students/{student_id}/push-token")
        async def push_token(
            student_id: str, request: Request, payload: dict = Body(...), user: dict = Depends(current_user)
        ):
            record(request, payload)
            return _ok({"studentId": student_id})

        @app.patch("/api/students/{student_id}/notification-settings")
        async def notification_settings(
            student_id: str, request: Request, payload: dict = Body(...), user: dict = Depends(current_user)
        ):
            record(request, payload)
            return _ok(payload)

        @app.get("/api/teachers")
        async def teachers(branchId: Optional[str] = None, user: dict = Depends(current_user)):
            return _ok(by_branch(TEACHERS, branchId))

        @app.get("/api/branches")
        async def branches(user: dict = Depends(current_user)):
            return _ok(BRANCHES)

        # ── ארנק ──

        @app.get("/api/wallet/summary/{owner_id}/{owner_type}")
        async def wallet_summary(owner_id: str, owner_type: str, user: dict = Depends(current_user)):
            summary = backend.summary(owner_id)
            if summary is None:
                raise HTTPException(404, "Wallet not found")
            return _ok(summary)

        @app.get("/api/wallet/transactions/all")
        async def all_transactions(user: dict = Depends(current_user)):
            require_role(user, "admin", "founder", "receptionist", "manager")
            return _ok({"transactions": list(reversed(backend.transactions))})

        @app.get("/api/wallet/transactions/{owner_id}/{owner_type}")
        async def owner_transactions(
            owner_id: str,
            owner_type: str,
            limit: int = 50,
            page: int = 1,
            user: dict = Depends(current_user),
        ):
            txs = [tx for tx in reversed(backend.transactions) if tx["ownerId"] == owner_id]
            start = (page - 1) * limit
            return _ok({
                "transactions": txs[start:start + limit],
                "total": len(txs),
                "page": page,
                "limit": limit,
                "totalPages": (len(txs) + limit - 1) // limit,
            })

        @app.post("/api/wallet/top-up")
        async def top_up(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            owner_id = payload.get("ownerId")
            wallet = backend.wallets.get(owner_id)
            if wallet is None:
                raise HTTPException(404, "Wallet not found")
            if wallet["isLocked"]:
                raise HTTPException(400, "Wallet is locked")
            amount = payload.get("amount")
            if not isinstance(amount, int) or not SERVER_TOPUP_MIN <= amount <= SERVER_TOPUP_MAX:
                raise HTTPException(400, "Top-up amount is out of range")
            tx = backend.add_transaction(
                owner_id,
                transactionType="top-up",
                direction="credit",
                amount=amount,
                status="pending",
                reason=payload.get("reason"),
                paymentMethod=payload.get("paymentMethod"),
                createdBy={"_id": user["id"], "name": user["name"]},
            )
            return _ok({"transaction": tx}, message="Top-up request created")

        @app.patch("/api/wallet/top-up/{transaction_id}/confirm")
        async def confirm_top_up(transaction_id: str, user: dict = Depends(current_user)):
            require_role(user, "admin", "founder", "receptionist", "manager")
            tx = find(backend.transactions, transaction_id, "Transaction")
            if tx["status"] != "pending":
                raise HTTPException(400, "Transaction is not pending")
            tx["status"] = "completed"
            return _ok(tx)

        @app.patch("/api/wallet/top-up/{transaction_id}/fail")
        async def fail_top_up(
            transaction_id: str,
            request: Request,
            payload: dict = Body(default={}),
            user: dict = Depends(current_user),
        ):
            record(request, payload)
            require_role(user, "admin", "founder", "receptionist", "manager")
            tx = find(backend.transactions, transaction_id, "Transaction")
            if tx["status"] != "pending":
                raise HTTPException(400, "Transaction is not pending")
            tx["status"] = "failed"
            tx["failureReason"] = payload.get("reason")
            return _ok(tx)

        def admin_wallet_tx(user: dict, payload: dict, transaction_type: str, direction: str) -> dict:
            require_role(user, "admin", "founder")
            student_id = payload.get("studentId")
            if student_id not in backend.wallets:
                raise HTTPException(404, "Wallet not found")
            return backend.add_transaction(
                student_id,
                transactionType=transaction_type,
                direction=direction,
                amount=payload["amount"],
                reason=payload.get("reason"),
                createdBy={"_id": user["id"], "name": user["name"]},
            )

        @app.post("/api/wallet/penalty")
        async def penalty(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            return _ok(admin_wallet_tx(user, payload, "penalty", "debit"))

        @app.post("/api/wallet/refund")
        async def refund(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            return _ok(admin_wallet_tx(user, payload, "refund", "credit"))

        @app.post("/api/wallet/adjustment")
        async def adjustment(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            require_role(user, "admin", "founder")
            owner_id = next(
                (owner for owner, wallet in backend.wallets.items() if wallet["_id"] == payload.get("walletId")),
                None,
            )
            if owner_id is None:
                raise HTTPException(404, "Wallet not found")
            tx = backend.add_transaction(
                owner_id,
                transactionType="adjustment",
                direction=payload["direction"],
                amount=payload["amount"],
                reason=payload.get("reason"),
                createdBy={"_id": user["id"], "name": user["name"]},
            )
            return _ok(tx)

        def wallet_by_id(wallet_id: str) -> dict:
            for wallet in backend.wallets.values():
                if wallet["_id"] == wallet_id:
                    return wallet
            raise HTTPException(404, "Wallet not found")

        @app.patch("/api/wallet/lock/{wallet_id}")
        async def lock(
            wallet_id: str,
            request: Request,
            payload: dict = Body(default={}),
            user: dict = Depends(current_user),
        ):
            record(request, payload)
            require_role(user, "admin", "founder")
            wallet = wallet_by_id(wallet_id)
            wallet["isLocked"] = True
            wallet["lockReason"] = payload.get("reason")
            return _ok(wallet)

        @app.patch("/api/wallet/unlock/{wallet_id}")
        async def unlock(wallet_id: str, user: dict = Depends(current_user)):
            require_role(user, "admin", "founder")
            wallet = wallet_by_id(wallet_id)
            wallet["isLocked"] = False
            wallet["lockReason"] = None
            return _ok(wallet)

        # ── הכנסות צוות ──

        def staff_filter(user: dict, staff_id: Optional[str]) -> Optional[str]:
            if user.get("role") == "teacher":
                return user["id"]
            return staff_id

        @app.get("/api/staff-earnings")
        async def list_earnings(
            staffId: Optional[str] = None,
            status: Optional[str] = None,
            branchId: Optional[str] = None,
            user: dict = Depends(current_user),
        ):
            staff_id = staff_filter(user, staffId)
            earnings = by_branch(backend.earnings, branchId)
            if staff_id:
                earnings = [e for e in earnings if e["staffId"] == staff_id]
            if status:
                earnings = [e for e in earnings if e["status"] == status]
            return _ok(earnings, count=len(earnings))

        @app.get("/api/staff-earnings/account")
        async def staff_account(staffId: Optional[str] = None, user: dict = Depends(current_user)):
            staff_id = staff_filter(user, staffId) or user["id"]
            mine = [e for e in backend.earnings if e["staffId"] == staff_id]
            earned = sum(e["amount"] for e in mine if e["status"] in ("approved", "paid"))
            paid_out = sum(
                p["amount"] for p in backend.payouts
                if p["staffId"]["_id"] == staff_id and p["status"] == "completed"
            )
            return _ok({
                "staffId": staff_id,
                "totalEarned": earned,
                "totalPaidOut": paid_out,
                "availableForPayout": earned - paid_out,
                "pendingEarnings": sum(e["amount"] for e in mine if e["status"] == "pending"),
                "currency": "UZS",
            })

        @app.get("/api/staff-earnings/pending")
        async def pending_earnings(branchId: Optional[str] = None, user: dict = Depends(current_user)):
            require_role(user, "admin", "founder", "manager")
            earnings = [e for e in by_branch(backend.earnings, branchId) if e["status"] == "pending"]
            return _ok(earnings)

        @app.patch("/api/staff-earnings/{earning_id}/approve")
        async def approve(earning_id: str, user: dict = Depends(current_user)):
            require_role(user, "admin", "founder", "manager")
            earning = find(backend.earnings, earning_id, "Earning")
            if earning["status"] != "pending":
                raise HTTPException(400, "Earning is not pending")
            earning["status"] = "approved"
            earning["approvedBy"] = {"_id": user["id"], "name": user["name"]}
            return _ok(earning)

        def manual_earning(user: dict, payload: dict, earning_type: str, sign: int) -> dict:
            require_role(user, "admin", "founder")
            earning = {
                "_id": backend.next_id("e"),
                "staffId": payload["staffId"],
                "earningType": earning_type,
                "amount": sign * payload["amount"],
                "status": "approved",
                "reason": payload.get("reason"),
                "referenceDate": _now(),
            }
            backend.earnings.append(earning)
            return earning

        @app.post("/api/staff-earnings/bonus")
        async def bonus(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            return _ok(manual_earning(user, payload, "bonus", 1))

        @app.post("/api/staff-earnings/penalty")
        async def earning_penalty(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            return _ok(manual_earning(user, payload, "penalty", -1))

        @app.post("/api/staff-earnings/adjustment")
        async def earning_adjustment(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            sign = 1 if payload.get("direction") == "credit" else -1
            return _ok(manual_earning(user, payload, "adjustment", sign))

        # ── תשלומי שכר ──

        @app.get("/api/salary-payouts")
        async def list_payouts(branchId: Optional[str] = None, user: dict = Depends(current_user)):
            require_role(user, "admin", "founder", "manager")
            return _ok(list(reversed(backend.payouts)))

        @app.post("/api/salary-payouts")
        async def create_payout(request: Request, payload: dict = Body(...), user: dict = Depends(current_user)):
            record(request, payload)
            require_role(user, "admin", "founder", "manager")
            if payload.get("amount", 0) <= 0:
                raise HTTPException(400, "Amount must be positive")
            if payload.get("method") == "bank-transfer" and not (payload.get("bankDetails") or {}).get("accountNumber"):
                raise HTTPException(400, "Bank details are required for bank transfers")
            payout = backend.add_payout(
                payload["staffId"],
                amount=payload["amount"],
                method=payload["method"],
                bankDetails=payload.get("bankDetails"),
                notes=payload.get("notes"),
                paymentDate=payload.get("paymentDate"),
            )
            return _ok(payout)

        @app.patch("/api/salary-payouts/{payout_id}/complete")
        async def complete_payout(payout_id: str, user: dict = Depends(current_user)):
            require_role(user, "admin", "founder", "manager")
            payout = find(backend.payouts, payout_id, "Payout")
            if payout["status"] != "pending":
                raise HTTPException(400, "Payout is not pending")
            payout["status"] = "completed"
            payout["completedAt"] = _now()
            return _ok(payout)

        @app.patch("/api/salary-payouts/{payout_id}/cancel")
        async def cancel_payout(
            payout_id: str,
            request: Request,
            payload: dict = Body(default={}),
            user: dict = Depends(current_user),
        ):
            record(request, payload)
            require_role(user, "admin", "founder", "manager")
            payout = find(backend.payouts, payout_id, "Payout")
            if len((payload.get("reason") or "").strip()) < 10:
                raise HTTPException(400, "Cancellation reason must be at least 10 characters")
            if payout["status"] != "pending":
                raise HTTPException(400, "Payout is not pending")
            payout["status"] = "cancelled"
            payout["cancellationReason"] = payload["reason"]
            return _ok(payout)

        return app


class ScriptedNotifier(Notifier):
    """דיאלוגים מתוסרטים: תשובות מוכנות מראש ורישום של כל מה שהוצג"""

    def __init__(self, confirm: bool = True, prompts: Optional[list[Optional[str]]] = None):
        self.confirm_answer = confirm
        self.prompt_answers = list(prompts or [])
        self.alerts: list[str] = []
        self.confirms: list[str] = []
        self.prompts: list[str] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def confirm(self, message: str) -> bool:
        self.confirms.append(message)
        return self.confirm_answer

    def prompt(self, message: str) -> Optional[str]:
        self.prompts.append(message)
        return self.prompt_answers.pop(0) if self.prompt_answers else None


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def transport(backend: FakeBackend) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=backend.app)


@pytest.fixture
def session() -> SessionStorage:
    return SessionStorage()


@pytest.fixture
async def client(session: SessionStorage, transport: httpx.ASGITransport):
    api_client = ApiClient(session, BASE_URL, transport=transport)
    yield api_client
    await api_client.aclose()


@pytest.fixture
def api(client: ApiClient) -> SchoolApi:
    return SchoolApi(client)


@pytest.fixture
def auth(api: SchoolApi, session: SessionStorage) -> AuthContext:
    return AuthContext(api, session)


@pytest.fixture
def branch(api: SchoolApi, auth: AuthContext) -> BranchContext:
    return BranchContext(api, auth)


@pytest.fixture
def language() -> LanguageContext:
    return LanguageContext(default="en")


@pytest.fixture
def notifier() -> ScriptedNotifier:
    return ScriptedNotifier()


@pytest.fixture
def panel_kwargs(api, auth, language, notifier, branch) -> dict:
    return {
        "api": api,
        "auth": auth,
        "language": language,
        "notifier": notifier,
        "branch": branch,
    }


@pytest.fixture
def login(auth: AuthContext):
    """התחברות לפי אימייל דרך נקודת ה-login של ה-backend המזויף"""
    async def _login(email: str, user_type: str = "teacher") -> dict:
        result = await auth.login(email, PASSWORD, user_type)
        assert result.success, result.message
        return result.user

    return _login
