"""Builds the session core and its collaborators from a SessionConfig."""

from dataclasses import dataclass
from typing import Optional

import httpx

from .client import AuthClient
from .config import SessionConfig
from .logging import get_logger
from .session.manager import SessionManager
from .session.scheduler import Scheduler
from .session.storage import FileStore, MemoryStore, NamespacedStorage
from .ui.activity import ActivityMonitor, EventHub
from .ui.login_flow import LoginFlow
from .ui.sinks import LoggingNavigator, LoggingNotifier, NavigationListener

logger = get_logger("main")


@dataclass
class SessionRuntime:
    """Everything one running client needs, wired together."""
    config: SessionConfig
    persistent: NamespacedStorage
    short_lived: NamespacedStorage
    client: AuthClient
    notifier: LoggingNotifier
    navigator: LoggingNavigator
    manager: SessionManager
    activity: EventHub
    monitor: ActivityMonitor
    login_flow: LoginFlow

    def start(self) -> None:
        """Rehydrate any persisted session and begin watching activity."""
        state = self.manager.start()
        self.monitor.mount()
        logger.info(f"Session runtime started (authenticated={state.is_authenticated})")

    async def aclose(self) -> None:
        self.monitor.unmount()
        # Refresh must be cancelled before its HTTP client goes away
        await self.manager.aclose()
        await self.client.close()


def build_runtime(
    config: Optional[SessionConfig] = None,
    scheduler: Optional[Scheduler] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SessionRuntime:
    config = config or SessionConfig()

    persistent = NamespacedStorage(FileStore(config.storage_file), config.storage_prefix)
    short_lived = NamespacedStorage(MemoryStore(), config.storage_prefix)
    client = AuthClient(config, transport=transport)
    notifier = LoggingNotifier()
    navigator = LoggingNavigator()

    manager = SessionManager(
        persistent=persistent,
        short_lived=short_lived,
        refresher=client,
        notifier=notifier,
        scheduler=scheduler,
        config=config,
    )
    manager.subscribe(NavigationListener(navigator))

    activity = EventHub()
    monitor = ActivityMonitor(manager, activity)
    login_flow = LoginFlow(manager, client, persistent, short_lived, notifier, navigator)

    return SessionRuntime(
        config=config,
        persistent=persistent,
        short_lived=short_lived,
        client=client,
        notifier=notifier,
        navigator=navigator,
        manager=manager,
        activity=activity,
        monitor=monitor,
        login_flow=login_flow,
    )
