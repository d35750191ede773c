# tests/test_client.py
from datetime import timedelta

import pytest
from httpx import ASGITransport

from crudsuite.client.api import ApiClient, ApiError
from crudsuite.client.controllers import (
    CheckoutError,
    IncompleteQuiz,
    JobBoardController,
    LoginRequired,
    QuizController,
    StorefrontController,
)
from crudsuite.client.session import ClientSession, LocalStore
from crudsuite.core.config import Deployment
from crudsuite.main import create_app
from crudsuite.repositories import products as products_repo
from crudsuite.services.auth import create_access_token

BASE_URL = "http://testserver"


def api_for(deployment: Deployment) -> ApiClient:
    return ApiClient(transport=ASGITransport(app=create_app(deployment)))


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "client" / "store.json")


def test_local_store_persists(store):
    assert store.get("missing", "default") == "default"
    store.set("cart", [{"product_id": "p1", "quantity": 2}])
    assert LocalStore(store.path).get("cart") == [{"product_id": "p1", "quantity": 2}]
    store.remove("cart")
    assert store.get("cart") is None


def test_local_store_ignores_corrupt_file(store):
    store.path.parent.mkdir(parents=True, exist_ok=True)
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() == {}


def test_session_survives_restart(store):
    session = ClientSession(base_url=BASE_URL, store=store)
    session.login("tok", {"id": "u1", "name": "Ada"})
    restored = ClientSession.restore(BASE_URL, store)
    assert restored.token == "tok"
    assert restored.auth_headers() == {"Authorization": "Bearer tok"}
    restored.logout()
    assert ClientSession.restore(BASE_URL, store).token is None


def test_session_reads_claims_without_secret():
    token = create_access_token({"id": "abc", "role": "user", "name": "Ada", "email": "a@x.io"})
    session = ClientSession(base_url=BASE_URL, token=token)
    assert session.claims()["sub"] == "abc"
    assert not session.token_expired()

    expired = create_access_token({"id": "abc"}, expires_delta=timedelta(seconds=-10))
    assert ClientSession(base_url=BASE_URL, token=expired).token_expired()
    assert ClientSession(base_url=BASE_URL, token="junk").claims() is None


def test_cart_operations(store):
    shop = StorefrontController(api_for(Deployment.SHOP), ClientSession(base_url=BASE_URL, store=store))
    belt = {"id": "p1", "name": "Leather Belt", "price": 79.99}
    scarf = {"id": "p2", "name": "Silk Scarf", "price": 69.99}
    shop.add_to_cart(belt)
    shop.add_to_cart(belt, 2)
    shop.add_to_cart(scarf)
    assert shop.cart_count() == 4
    assert shop.cart_total() == round(79.99 * 3 + 69.99, 2)

    shop.update_quantity("p1", 1)
    assert [line["quantity"] for line in shop.cart] == [1, 1]
    shop.update_quantity("p2", 0)
    assert [line["product_id"] for line in shop.cart] == ["p1"]
    shop.remove_from_cart("p1")
    assert shop.cart == []


def test_checkout_step_presence_checks(store):
    shop = StorefrontController(api_for(Deployment.SHOP), ClientSession(base_url=BASE_URL, store=store))
    assert shop.checkout_step == "shipping"
    with pytest.raises(CheckoutError) as exc:
        shop.submit_shipping({"first_name": "Ada", "city": " "})
    assert "city" in exc.value.missing
    assert shop.checkout_step == "shipping"

    with pytest.raises(CheckoutError):
        shop.submit_payment({"card_number": "4242", "card_name": "Ada"})


@pytest.mark.asyncio
async def test_storefront_checkout_flow(store, make_user, make_product):
    await make_user(email="buyer@example.com")
    belt = await make_product(stock=70)
    session = ClientSession(base_url=BASE_URL, store=store)
    shop = StorefrontController(api_for(Deployment.SHOP), session)

    await shop.login("buyer@example.com", "secret123")
    assert (await shop.check_auth())["email"] == "buyer@example.com"

    products = await shop.fetch_products(category="accessories")
    shop.add_to_cart(products[0], 5)
    shop.submit_shipping({
        "first_name": "Ada", "last_name": "Lovelace", "address": "1 St", "city": "London", "zip": "N1", "country": "UK",
    })
    assert shop.submit_payment({"card_number": "4242 4242 4242 4242", "card_name": "Ada"}) == "review"
    assert shop.back() == "payment"
    shop.submit_payment({"card_number": "4242 4242 4242 4242", "card_name": "Ada"})

    order = await shop.place_order()
    assert order["total"] == 399.95
    assert shop.cart == []
    assert shop.checkout_step == "done"
    assert "4242" not in store.path.read_text(encoding="utf-8")
    assert (await products_repo.get_product(belt["id"]))["stock"] == 65
    assert [o["id"] for o in await shop.my_orders()] == [order["id"]]


@pytest.mark.asyncio
async def test_server_error_message_passes_through(store, make_user, make_product):
    user, _ = await make_user()
    belt = await make_product(stock=1)
    session = ClientSession(base_url=BASE_URL, store=store)
    session.login(create_access_token(user), user)
    shop = StorefrontController(api_for(Deployment.SHOP), session)

    shop.add_to_cart({"id": belt["id"], "name": belt["name"], "price": belt["price"]}, 3)
    shop.submit_shipping({"first_name": "A", "last_name": "B", "address": "C", "city": "D", "zip": "E", "country": "F"})
    shop.submit_payment({"card_number": "4242", "card_name": "A B"})
    with pytest.raises(ApiError) as exc:
        await shop.place_order()
    assert exc.value.status == 400
    assert exc.value.message == "Insufficient stock for Leather Belt"
    # cart is kept so the user can fix it
    assert shop.cart_count() == 3


@pytest.mark.asyncio
async def test_check_auth_drops_rejected_token(store):
    session = ClientSession(base_url=BASE_URL, store=store)
    session.login("forged-token", {"id": "x"})
    shop = StorefrontController(api_for(Deployment.SHOP), session)
    assert await shop.check_auth() is None
    assert session.token is None
    assert store.get("token") is None


@pytest.mark.asyncio
async def test_quiz_controller_flow(store, make_user):
    user, _ = await make_user()
    session = ClientSession(base_url=BASE_URL, store=store)
    api = api_for(Deployment.QUIZ)
    quiz_ctl = QuizController(api, session)

    with pytest.raises(LoginRequired):
        await quiz_ctl.open_quiz("anything")

    session.login(create_access_token(user), user)
    created = await api.post(session, "/api/quizzes", json={
        "title": "Tiny Quiz",
        "questions": [
            {"question": "1?", "options": ["a", "b", "c", "d"], "correct_answer": 0},
            {"question": "2?", "options": ["a", "b", "c", "d"], "correct_answer": 1},
        ],
    })
    quiz_id = created["quiz"]["id"]

    await quiz_ctl.open_quiz(quiz_id)
    assert quiz_ctl.answers == [None, None]
    quiz_ctl.answer(0)
    with pytest.raises(IncompleteQuiz) as exc:
        await quiz_ctl.submit()
    assert exc.value.unanswered == [1]

    # progress survives a restart
    resumed = QuizController(api, ClientSession.restore(BASE_URL, store))
    await resumed.open_quiz(quiz_id)
    assert resumed.answers == [0, None]
    resumed.next()
    resumed.answer(1)
    with pytest.raises(ValueError):
        resumed.answer(7)
    assert resumed.prev() == 0

    result = await resumed.submit(time_taken=12)
    assert result["score"] == 2
    assert result["percentage"] == 100.0
    assert store.get("quiz_session") is None
    assert len(await resumed.history()) == 1


@pytest.mark.asyncio
async def test_job_board_controller(store, make_user):
    _, recruiter_headers = await make_user(role="recruiter", company_name="Acme")
    await make_user(role="student", email="stu@example.com", resume=None)
    api = api_for(Deployment.JOBS)
    transport_session = ClientSession(base_url=BASE_URL)
    board = JobBoardController(api, ClientSession(base_url=BASE_URL, store=store))

    job = (await api.request(
        transport_session, "POST", "/api/jobs",
        json={"title": "Intern", "description": "d", "location": "Remote", "salary": "1"},
        headers=recruiter_headers,
    ))["job"]

    await board.login("stu@example.com", "secret123")
    with pytest.raises(ApiError) as exc:
        await board.apply(job["id"])
    assert exc.value.message == "Please upload your resume before applying"

    await board.upload_resume("cv.pdf", b"%PDF-1.4")
    application = await board.apply(job["id"], "Hello")
    assert [a["id"] for a in await board.my_applications()] == [application["id"]]
    assert [j["id"] for j in await board.list_jobs(search="intern")] == [job["id"]]

    await board.withdraw(application["id"])
    assert await board.my_applications() == []
