from orderdesk.core.notifications import Notifier
from orderdesk.flow.navigation import Navigator


def test_notifier_records_and_fans_out():
    notifier = Notifier()
    seen = []
    unsubscribe = notifier.subscribe(seen.append)

    notifier.success("Order created successfully")
    notifier.error("Failed to create order")
    unsubscribe()
    notifier.success("Ignored by listener")

    assert [n.description for n in seen] == ["Order created successfully", "Failed to create order"]
    assert seen[1].is_error
    assert notifier.titles() == ["Success", "Error", "Success"]


def test_notifier_history_is_bounded():
    notifier = Notifier(history_limit=2)
    for i in range(5):
        notifier.success(str(i))

    assert [n.description for n in notifier.history] == ["3", "4"]

    notifier.clear()
    assert notifier.last is None


def test_navigator_push_replace_and_back():
    navigator = Navigator("/login")
    paths = []
    navigator.subscribe(paths.append)

    navigator.navigate("/dashboard")
    navigator.navigate("/orders", replace=True)

    assert navigator.history == ["/login", "/orders"]
    assert paths == ["/dashboard", "/orders"]
    assert navigator.back() == "/login"
    assert navigator.back() == "/login"
