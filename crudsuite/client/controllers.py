# crudsuite/client/controllers.py
"""
Client controllers for the three front ends.

These checks exist for the user's convenience only. Every rule is enforced
again by the server, and an ``ApiError`` from the server always wins.
"""
import logging
from typing import Any, Dict, List, Optional

from crudsuite.client.api import ApiClient, ApiError
from crudsuite.client.session import ClientSession

logger = logging.getLogger(__name__)

CHECKOUT_STEPS = ("shipping", "payment", "review", "done")
SHIPPING_FIELDS = ("first_name", "last_name", "address", "city", "zip", "country")
PAYMENT_FIELDS = ("card_number", "card_name")


class LoginRequired(Exception):
    pass


class CheckoutError(ValueError):
    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Please fill in: {', '.join(missing)}")


class IncompleteQuiz(ValueError):
    def __init__(self, unanswered: List[int]):
        self.unanswered = unanswered
        super().__init__(f"Please answer all questions ({len(unanswered)} left)")


def _missing(info: Dict[str, Any], fields) -> List[str]:
    return [f for f in fields if not str(info.get(f) or "").strip()]


class _BaseController:
    def __init__(self, api: ApiClient, session: ClientSession):
        self.api = api
        self.session = session
        # used when the session has no LocalStore
        self._memory: Dict[str, Any] = {}

    def _load(self, key: str, default=None):
        if self.session.store is None:
            return self._memory.get(key, default)
        return self.session.store.get(key, default)

    def _save(self, key: str, value) -> None:
        if self.session.store is None:
            self._memory[key] = value
        else:
            self.session.store.set(key, value)

    def _drop(self, key: str) -> None:
        self._memory.pop(key, None)
        if self.session.store is not None:
            self.session.store.remove(key)

    async def register(self, name: str, email: str, password: str, role: Optional[str] = None) -> Dict[str, Any]:
        body = {"name": name, "email": email, "password": password}
        if role:
            body["role"] = role
        data = await self.api.post(self.session, "/api/auth/register", json=body)
        self.session.login(data["token"], data["user"])
        return data["user"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self.api.post(self.session, "/api/auth/login", json={"email": email, "password": password})
        self.session.login(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.session.logout()

    async def check_auth(self) -> Optional[Dict[str, Any]]:
        """Confirm the cached token with the server; a rejected token is dropped."""
        if not self.session.is_authenticated:
            return None
        try:
            user = await self.api.get(self.session, "/api/auth/me")
        except ApiError as exc:
            if exc.status == 401:
                logger.info("Stored token rejected (%s), logging out", exc.message)
                self.session.logout()
                return None
            raise
        self.session.user = user
        return user


class StorefrontController(_BaseController):

    def __init__(self, api: ApiClient, session: ClientSession):
        super().__init__(api, session)
        # card details stay in memory only
        self._payment: Optional[Dict[str, str]] = None

    @property
    def cart(self) -> List[Dict[str, Any]]:
        return self._load("cart", [])

    @property
    def checkout_step(self) -> str:
        return self._load("checkout_step", CHECKOUT_STEPS[0])

    async def fetch_products(self, category: Optional[str] = None, search: Optional[str] = None, sort: Optional[str] = None):
        return await self.api.get(self.session, "/api/products", params={"category": category, "search": search, "sort": sort})

    async def fetch_product(self, product_id: str):
        return await self.api.get(self.session, f"/api/products/{product_id}")

    def add_to_cart(self, product: Dict[str, Any], quantity: int = 1) -> List[Dict[str, Any]]:
        cart = self.cart
        for line in cart:
            if line["product_id"] == product["id"]:
                line["quantity"] += quantity
                break
        else:
            cart.append({
                "product_id": product["id"],
                "name": product["name"],
                "price": product["price"],
                "image": product.get("image"),
                "quantity": quantity,
            })
        self._save("cart", cart)
        return cart

    def remove_from_cart(self, product_id: str) -> List[Dict[str, Any]]:
        cart = [line for line in self.cart if line["product_id"] != product_id]
        self._save("cart", cart)
        return cart

    def update_quantity(self, product_id: str, quantity: int) -> List[Dict[str, Any]]:
        if quantity <= 0:
            return self.remove_from_cart(product_id)
        cart = self.cart
        for line in cart:
            if line["product_id"] == product_id:
                line["quantity"] = quantity
        self._save("cart", cart)
        return cart

    def clear_cart(self) -> None:
        self._save("cart", [])

    def cart_total(self) -> float:
        return round(sum(line["price"] * line["quantity"] for line in self.cart), 2)

    def cart_count(self) -> int:
        return sum(line["quantity"] for line in self.cart)

    def _goto(self, step: str) -> None:
        self._save("checkout_step", step)

    def submit_shipping(self, info: Dict[str, Any]) -> str:
        missing = _missing(info, SHIPPING_FIELDS)
        if missing:
            raise CheckoutError(missing)
        self._save("shipping_info", {f: info[f] for f in SHIPPING_FIELDS})
        self._goto("payment")
        return self.checkout_step

    def submit_payment(self, info: Dict[str, Any]) -> str:
        if self.checkout_step != "payment":
            raise CheckoutError(["shipping"])
        missing = _missing(info, PAYMENT_FIELDS)
        if missing:
            raise CheckoutError(missing)
        self._payment = {f: info[f] for f in PAYMENT_FIELDS}
        self._goto("review")
        return self.checkout_step

    def back(self) -> str:
        idx = CHECKOUT_STEPS.index(self.checkout_step)
        if 0 < idx < len(CHECKOUT_STEPS) - 1:
            self._goto(CHECKOUT_STEPS[idx - 1])
        return self.checkout_step

    async def place_order(self) -> Dict[str, Any]:
        if not self.session.is_authenticated:
            raise LoginRequired("Please log in to place an order")
        if not self.cart:
            raise CheckoutError(["cart"])
        payment = self._payment
        if self.checkout_step != "review" or payment is None:
            raise CheckoutError(["payment"])
        body = {
            "items": [{"product_id": line["product_id"], "quantity": line["quantity"]} for line in self.cart],
            "shipping_info": self._load("shipping_info"),
            "payment_info": payment,
        }
        data = await self.api.post(self.session, "/api/orders", json=body)
        self.clear_cart()
        self._payment = None
        self._goto("done")
        return data["order"]

    def start_over(self) -> None:
        self._goto(CHECKOUT_STEPS[0])

    async def my_orders(self):
        return await self.api.get(self.session, "/api/orders/my-orders")

    async def cancel_order(self, order_id: str):
        return await self.api.post(self.session, f"/api/orders/{order_id}/cancel")


class QuizController(_BaseController):
    """Quiz taking. Progress is persisted under ``quiz_session``."""

    def __init__(self, api: ApiClient, session: ClientSession):
        super().__init__(api, session)
        self.quiz: Optional[Dict[str, Any]] = None
        self.answers: List[Optional[int]] = []
        self.current = 0

    def is_logged_in(self) -> bool:
        return self.session.is_authenticated and not self.session.token_expired()

    def require_login(self) -> Dict[str, Any]:
        if not self.is_logged_in():
            raise LoginRequired("Please log in to continue")
        return self.session.claims()

    async def list_quizzes(self, search: Optional[str] = None, category: Optional[str] = None, difficulty: Optional[str] = None):
        return await self.api.get(self.session, "/api/quizzes", params={"search": search, "category": category, "difficulty": difficulty})

    def _persist(self) -> None:
        self._save("quiz_session", {"quiz_id": self.quiz["id"], "answers": self.answers, "current": self.current})

    async def open_quiz(self, quiz_id: str) -> Dict[str, Any]:
        self.require_login()
        self.quiz = await self.api.get(self.session, f"/api/quizzes/{quiz_id}")
        saved = self._load("quiz_session") or {}
        n = len(self.quiz["questions"])
        if saved.get("quiz_id") == quiz_id and len(saved.get("answers", [])) == n:
            self.answers = saved["answers"]
            self.current = min(int(saved.get("current", 0)), n - 1)
        else:
            self.answers = [None] * n
            self.current = 0
        self._persist()
        return self.quiz

    def answer(self, option: int) -> None:
        options = self.quiz["questions"][self.current]["options"]
        if not 0 <= option < len(options):
            raise ValueError("Invalid option")
        self.answers[self.current] = option
        self._persist()

    def next(self) -> int:
        if self.current < len(self.answers) - 1:
            self.current += 1
            self._persist()
        return self.current

    def prev(self) -> int:
        if self.current > 0:
            self.current -= 1
            self._persist()
        return self.current

    def unanswered(self) -> List[int]:
        return [i for i, a in enumerate(self.answers) if a is None]

    async def submit(self, time_taken: int = 0) -> Dict[str, Any]:
        self.require_login()
        missing = self.unanswered()
        if missing:
            raise IncompleteQuiz(missing)
        result = await self.api.post(
            self.session,
            f"/api/quizzes/{self.quiz['id']}/submit",
            json={"answers": self.answers, "time_taken": time_taken},
        )
        self._drop("quiz_session")
        return result

    async def leaderboard(self, quiz_id: str, limit: int = 10):
        return await self.api.get(self.session, f"/api/quizzes/{quiz_id}/leaderboard", params={"limit": limit})

    async def history(self):
        self.require_login()
        return await self.api.get(self.session, "/api/quizzes/user/history")


class JobBoardController(_BaseController):

    async def list_jobs(self, job_type: Optional[str] = None, location: Optional[str] = None, search: Optional[str] = None):
        return await self.api.get(self.session, "/api/jobs", params={"job_type": job_type, "location": location, "search": search})

    async def get_job(self, job_id: str):
        return await self.api.get(self.session, f"/api/jobs/{job_id}")

    async def upload_resume(self, filename: str, content: bytes) -> Dict[str, Any]:
        data = await self.api.put(
            self.session,
            "/api/auth/profile/student",
            files={"resume": (filename, content, "application/pdf")},
        )
        self.session.user = data["user"]
        return data["user"]

    async def apply(self, job_id: str, cover_letter: str = "") -> Dict[str, Any]:
        if not self.session.is_authenticated:
            raise LoginRequired("Please log in to apply")
        data = await self.api.post(self.session, "/api/applications", json={"job_id": job_id, "cover_letter": cover_letter})
        return data["application"]

    async def withdraw(self, application_id: str):
        return await self.api.delete(self.session, f"/api/applications/{application_id}")

    async def my_applications(self):
        return await self.api.get(self.session, "/api/applications/my-applications")
