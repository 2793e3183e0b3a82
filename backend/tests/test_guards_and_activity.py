from __future__ import annotations

from bulkadmin.session.manager import IDLE_LOGOUT_MESSAGE
from bulkadmin.ui.activity import ACTIVITY_EVENTS, ActivityMonitor, EventHub
from bulkadmin.ui.guards import Redirect, guard_for, otp_route, protected_route, public_route
from bulkadmin.ui.sinks import LoggingNavigator, LoggingNotifier
from tests.helpers.fakes import FakeActivitySource


def test_protected_route_requires_session(manager):
    assert protected_route(manager) == Redirect("/login", replace=True)

    manager.login("tok1", "roleA", "a@x.com")
    assert protected_route(manager) is None


def test_public_route_skips_login_when_signed_in(manager):
    assert public_route(manager) is None

    manager.login("tok1", "roleA", "a@x.com")
    assert public_route(manager) == Redirect("/dashboard", replace=True)


def test_otp_route_needs_pending_email(manager, persistent):
    assert otp_route(manager, persistent) == Redirect("/login")

    persistent.set("email", "a@x.com")
    assert otp_route(manager, persistent) is None


def test_guard_for_picks_route_policy(manager, persistent):
    assert guard_for("/dashboard/search", manager, persistent) == Redirect("/login")
    assert guard_for("/login", manager, persistent) is None
    assert guard_for("/reset-password", manager, persistent) is None

    manager.login("tok1", "roleA", "a@x.com")
    assert guard_for("/dashboard/search", manager, persistent) is None
    assert guard_for("/login", manager, persistent) == Redirect("/dashboard")
    assert guard_for("/otp", manager, persistent) == Redirect("/dashboard")
    assert guard_for("/reset-password", manager, persistent) is None


def test_monitor_mount_subscribes_all_activity_events(manager, scheduler):
    source = FakeActivitySource()
    monitor = ActivityMonitor(manager, source)
    manager.login("tok1", "roleA", "a@x.com")

    monitor.mount()
    monitor.mount()

    assert sorted(source.listeners) == sorted(ACTIVITY_EVENTS)
    assert all(len(cbs) == 1 for cbs in source.listeners.values())


def test_activity_events_keep_session_alive(manager, scheduler, notifier):
    source = FakeActivitySource()
    ActivityMonitor(manager, source).mount()
    manager.login("tok1", "roleA", "a@x.com")

    for event in ACTIVITY_EVENTS * 3:
        scheduler.advance(45 * 60)
        source.fire(event)

    assert manager.is_authenticated
    scheduler.advance(60 * 60)
    assert notifier.count(IDLE_LOGOUT_MESSAGE) == 1


def test_unmount_unsubscribes_and_cancels_idle_timer(manager, scheduler, notifier):
    source = FakeActivitySource()
    monitor = ActivityMonitor(manager, source)
    manager.login("tok1", "roleA", "a@x.com")
    monitor.mount()

    monitor.unmount()

    assert all(cbs == [] for cbs in source.listeners.values())
    scheduler.advance(2 * 60 * 60)
    assert notifier.count(IDLE_LOGOUT_MESSAGE) == 0


def test_event_hub_delivers_to_listeners():
    hub = EventHub()
    hits = []
    callback = lambda: hits.append(1)  # noqa: E731
    hub.add_listener("scroll", callback)

    assert hub.emit("scroll") == 1
    assert hub.emit("keydown") == 0
    hub.remove_listener("scroll", callback)
    assert hub.emit("scroll") == 0
    assert hits == [1]


def test_logging_navigator_replace_rewrites_history():
    nav = LoggingNavigator()
    nav.navigate("/dashboard")
    nav.navigate("/", replace=True)

    assert nav.location == "/"
    assert nav.history == ["/", "/"]


def test_logging_notifier_drains_once():
    notifier = LoggingNotifier(maxlen=2)
    notifier.notify("info", "one")
    notifier.notify("error", "two")
    notifier.notify("success", "three")

    assert [n.message for n in notifier.drain()] == ["two", "three"]
    assert notifier.drain() == []
