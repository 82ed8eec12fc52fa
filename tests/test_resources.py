import asyncio

import httpx
import pytest

from orderdesk.core.exceptions import ApiError, ServerError, ValidationError
from orderdesk.schemas.order import OrderStatus
from orderdesk.schemas.product import ProductImage

from conftest import json_body


ORDER_FORM = {
    "customer_name": "Rahim Uddin",
    "mobile_number": "01712345678",
    "address": "House 12, Road 5, Dhanmondi, Dhaka",
    "product_id": 3,
    "quantity": 2,
    "delivery_charge": 60,
    "order_source": "Messenger",
}


@pytest.fixture
def seeded(backend):
    backend.on("GET", "/api/orders", body=[{"id": 1, "customer_name": "Rahim", "status": "Pending-Moderator"}])
    backend.on("GET", "/api/products", body=[{"id": 3, "name": "Saree", "sales_price": 1200}])
    backend.on("GET", "/api/tasks", body=[{"id": 5, "task_details": "Call back", "priority": "High"}])
    backend.on("GET", "/api/follow-ups", body=[{"followup_id": 8, "order_id": "ORD-1"}])
    backend.on("GET", "/api/users", body=[{"id": 2, "name": "Mo", "email": "mod@example.com", "role": "Moderator"}])
    return backend


async def test_collection_empty_before_load(app):
    assert app.orders.collection == []
    assert not app.orders.is_loading


async def test_load_parses_and_normalizes(app, seeded):
    orders = await app.orders.load()

    assert len(orders) == 1
    assert orders[0].id == "1"
    assert orders[0].status == OrderStatus.PENDING_MODERATOR


async def test_load_accepts_data_envelope(app, backend):
    backend.on("GET", "/api/tasks", body={"data": [{"id": 1, "task_details": "Pack"}]})

    tasks = await app.tasks.load()

    assert [t.task_details for t in tasks] == ["Pack"]


async def test_load_skips_malformed_rows(app, backend):
    backend.on("GET", "/api/users", body=[
        {"id": 1, "email": "a@example.com", "role": "Admin"},
        {"id": 2, "email": "b@example.com", "role": "Owner"},
    ])

    users = await app.users.load()

    assert [u.id for u in users] == ["1"]


async def test_load_of_non_list_body_is_empty(app, backend):
    backend.on("GET", "/api/orders", handler=lambda request: httpx.Response(200, text="<html>oops</html>"))

    assert await app.orders.load() == []
    assert app.orders.error is None


async def test_load_uses_cache_after_first_fetch(app, seeded):
    await app.orders.load()
    await app.orders.load()

    assert seeded.count("GET", "/api/orders") == 1


async def test_concurrent_loads_share_one_fetch(app, seeded):
    await asyncio.gather(app.products.load(), app.products.load(), app.products.load())

    assert seeded.count("GET", "/api/products") == 1


async def test_successful_mutation_refetches_own_key_once(app, seeded):
    await app.orders.load()
    await app.products.load()
    await app.tasks.load()
    seeded.on("POST", "/api/orders", status=201, body={"id": 2})

    result = await app.orders.create(ORDER_FORM)

    assert result == {"id": 2}
    assert seeded.count("GET", "/api/orders") == 2
    assert seeded.count("GET", "/api/products") == 1
    assert seeded.count("GET", "/api/tasks") == 1
    assert app.notifier.last.description == "Order created successfully"


async def test_mutation_refetches_past_a_load_in_flight(app, backend):
    server_orders = [{"id": 1, "customer_name": "Rahim"}]

    def create(request):
        server_orders.append({"id": 2, "customer_name": "Rahim Uddin"})
        return httpx.Response(201, json={"id": 2})

    backend.on("GET", "/api/orders", handler=lambda request: httpx.Response(200, json=list(server_orders)))
    backend.on("POST", "/api/orders", handler=create)

    fetched = asyncio.Event()
    release = asyncio.Event()
    original = app.api.get_orders

    async def get_orders():
        orders = await original()
        if not fetched.is_set():
            fetched.set()
            await release.wait()
        return orders

    app.api.get_orders = get_orders

    load = asyncio.ensure_future(app.orders.load())
    await fetched.wait()

    await app.orders.create(ORDER_FORM)

    assert backend.count("GET", "/api/orders") == 2
    assert [o.id for o in app.orders.collection] == ["1", "2"]

    release.set()
    await load
    assert [o.id for o in app.orders.collection] == ["1", "2"]


async def test_success_notice_comes_before_refetch(app, seeded):
    await app.orders.load()
    seen = []
    seeded.on("PUT", "/api/orders/1", body={"ok": True})

    def refetch(request):
        seen.append(app.notifier.last.description)
        return httpx.Response(200, json=[])

    seeded.on("GET", "/api/orders", handler=refetch)

    await app.orders.update("1", {"status": "Delivered"})

    assert seen == ["Order updated successfully"]


async def test_failed_mutation_leaves_cache_untouched(app, seeded):
    before = await app.orders.load()
    snapshot = [o.model_dump() for o in before]
    seeded.on("POST", "/api/orders", status=500)

    result = await app.orders.create(ORDER_FORM)

    assert result is None
    assert app.orders.collection is before
    assert [o.model_dump() for o in app.orders.collection] == snapshot
    assert seeded.count("GET", "/api/orders") == 1
    assert app.notifier.titles()[-2:] == ["Server Error", "Error"]
    assert app.notifier.last.description == "Failed to create order"


async def test_create_order_payload(app, seeded):
    seeded.on("POST", "/api/orders", body={"id": 9})

    await app.orders.create(ORDER_FORM)

    payload = json_body(seeded.last("POST", "/api/orders"))
    assert payload["product_id"] == "3"
    assert payload["quantity"] == 2
    assert payload["delivery_charge"] == 60
    assert payload["status"] == "Pending Moderator"
    assert "email" in payload


async def test_invalid_order_form_never_hits_network(app, seeded):
    form = dict(ORDER_FORM, mobile_number="12345")

    with pytest.raises(ValidationError) as exc_info:
        await app.orders.create(form)

    assert "phone" in exc_info.value.message
    assert seeded.count("POST", "/api/orders") == 0


async def test_delete_reraises_after_notifying(app, seeded):
    await app.orders.load()
    seeded.on("DELETE", "/api/orders/1", status=400, body={"message": "Order already shipped"})

    with pytest.raises(ApiError):
        await app.orders.delete("1")

    assert app.notifier.last.description == "Failed to delete order"
    assert seeded.count("GET", "/api/orders") == 1


async def test_dispatch_reraises(app, seeded):
    seeded.on("POST", "/api/orders/1/dispatch", status=500)

    with pytest.raises(ServerError):
        await app.orders.dispatch("1")


async def test_dispatch_success(app, seeded):
    await app.orders.load()
    seeded.on("POST", "/api/orders/1/dispatch", body={"tracking_code": "SF123"})

    await app.orders.dispatch("1")

    assert app.notifier.last.description == "Order dispatched successfully"
    assert seeded.count("GET", "/api/orders") == 2


async def test_product_create_is_multipart(app, seeded):
    seeded.on("POST", "/api/products", status=201, body={"id": 4})

    await app.products.create({
        "name": "Panjabi",
        "sales_price": 1500,
        "discount_price": 1350,
        "image": ProductImage(filename="p.png", content=b"\x89PNG", content_type="image/png"),
    })

    request = seeded.last("POST", "/api/products")
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="name"' in body
    assert b"Panjabi" in body
    assert b'filename="p.png"' in body


async def test_task_complete_sends_status_only(app, seeded):
    seeded.on("PUT", "/api/tasks/5", body={"ok": True})

    await app.tasks.complete("5")

    assert json_body(seeded.last("PUT", "/api/tasks/5")) == {"status": "Completed"}
    assert app.notifier.last.description == "Task updated successfully"


async def test_task_update_failure_is_swallowed(app, seeded):
    seeded.on("PUT", "/api/tasks/5", status=500)

    assert await app.tasks.update("5", {"priority": "Low"}) is None


async def test_follow_up_failure_uses_backend_message(app, seeded):
    seeded.on("POST", "/api/follow-ups", status=400, body={"message": "Order not found"})

    result = await app.follow_ups.create({"order_id": "ORD-404", "followup_date": "2024-05-01"})

    assert result is None
    assert app.notifier.last.description == "Order not found"


async def test_follow_up_mark_complete(app, seeded):
    follow_ups = await app.follow_ups.load()
    assert follow_ups[0].id == "8"
    seeded.on("PUT", "/api/follow-ups/8", body={"ok": True})

    await app.follow_ups.mark_complete("8")

    assert json_body(seeded.last("PUT", "/api/follow-ups/8")) == {"status": "Completed"}
    assert seeded.count("GET", "/api/follow-ups") == 2


async def test_user_mutations_reraise(app, seeded):
    seeded.on("PUT", "/api/users/2", status=400, body={"message": "Email already in use"})

    with pytest.raises(ApiError):
        await app.users.update("2", {"email": "taken@example.com"})

    assert app.notifier.last.description == "Failed to update user"


async def test_user_update_drops_blank_password(app, seeded):
    seeded.on("PUT", "/api/users/2", body={"ok": True})

    await app.users.update("2", {"name": "Mo Rahman", "password": ""})

    assert json_body(seeded.last("PUT", "/api/users/2")) == {"name": "Mo Rahman"}


async def test_moderators_view(app, seeded):
    await app.users.load()

    assert [u.name for u in app.users.moderators] == ["Mo"]


async def test_failed_first_load_keeps_empty_collection(app, backend):
    backend.on("GET", "/api/orders", status=500)

    orders = await app.orders.load()

    assert orders == []
    assert isinstance(app.orders.error, ServerError)
