from __future__ import annotations

import pytest

from bulkadmin.config import SessionConfig
from bulkadmin.session.manager import SessionManager
from bulkadmin.session.storage import FileStore, MemoryStore, NamespacedStorage
from bulkadmin.ui.sinks import NavigationListener
from tests.helpers.fakes import FakeRefresher, FakeScheduler, RecordingNavigator, RecordingNotifier

PREFIX = "providus_"


@pytest.fixture
def config(tmp_path):
    return SessionConfig(
        api_url="https://api.test",
        storage_dir=str(tmp_path / "store"),
        idle_timeout=60 * 60,
        session_timeout=30 * 60 * 60,
        refresh_threshold=20 * 60,
    )


@pytest.fixture
def scheduler():
    s = FakeScheduler()
    yield s
    s.discard_spawned()


@pytest.fixture
def persistent(config):
    return NamespacedStorage(FileStore(config.storage_file), PREFIX)


@pytest.fixture
def short_lived():
    return NamespacedStorage(MemoryStore(), PREFIX)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def refresher():
    return FakeRefresher()


@pytest.fixture
def manager(persistent, short_lived, refresher, notifier, navigator, scheduler, config):
    m = SessionManager(
        persistent=persistent,
        short_lived=short_lived,
        refresher=refresher,
        notifier=notifier,
        scheduler=scheduler,
        config=config,
    )
    m.subscribe(NavigationListener(navigator))
    return m


@pytest.fixture
def events(manager):
    """Every SessionEvent the manager publishes, in order."""
    seen = []
    manager.subscribe(seen.append)
    return seen
