"""
orderdesk/main.py

Purpose: Application entry point

- Wires storage, gateway, session manager, resource services and route gate
- Loads configuration and logging
- Manages the client lifecycle (restore session on start, close HTTP on stop)
- No business logic should be written here
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from orderdesk.core.config import Settings, settings, validate_settings
from orderdesk.core.logging import get_logger, setup_logging
from orderdesk.core.notifications import Notifier
from orderdesk.db.storage import PersistedSessionStore, SessionStorage, create_storage
from orderdesk.flow.navigation import Navigator
from orderdesk.flow.route_gate import RouteGate
from orderdesk.services.api_client import ApiGateway
from orderdesk.services.auth_service import AuthSessionManager
from orderdesk.services.endpoints import OrderDeskApi
from orderdesk.services.follow_up_service import FollowUpService
from orderdesk.services.order_service import OrderService
from orderdesk.services.product_service import ProductService
from orderdesk.services.query_client import QueryClient
from orderdesk.services.sms_service import SmsService
from orderdesk.services.task_service import TaskService
from orderdesk.services.user_service import UserService

logger = get_logger(__name__)


class OrderDeskApp:
    """
    One admin-panel client: every component shares the same session store,
    notifier, navigator and HTTP client.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        storage: Optional[SessionStorage] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or settings

        self.store = PersistedSessionStore(
            storage if storage is not None else create_storage(self.config.SESSION_STORAGE_PATH),
            token_key=self.config.TOKEN_STORAGE_KEY,
            user_key=self.config.USER_STORAGE_KEY,
        )
        self.notifier = Notifier(history_limit=self.config.NOTIFICATION_HISTORY_LIMIT)
        self.navigator = Navigator(initial_path=self.config.PUBLIC_PATH)

        self.gateway = ApiGateway(self.store, self.notifier, config=self.config, transport=transport)
        self.api = OrderDeskApi(self.gateway)
        self.queries = QueryClient()

        self.auth = AuthSessionManager(
            self.api,
            self.store,
            self.notifier,
            self.navigator,
            queries=self.queries,
            config=self.config,
        )

        self.orders = OrderService(self.api, self.queries, self.notifier)
        self.products = ProductService(self.api, self.queries, self.notifier)
        self.tasks = TaskService(self.api, self.queries, self.notifier)
        self.follow_ups = FollowUpService(self.api, self.queries, self.notifier)
        self.users = UserService(self.api, self.queries, self.notifier)
        self.sms = SmsService(self.api, self.notifier)

        self.gate = RouteGate(self.auth, self.navigator, config=self.config)

    async def start(self) -> None:
        await self.auth.initialize()

    async def close(self) -> None:
        await self.gateway.close()


@asynccontextmanager
async def lifespan(app: Optional[OrderDeskApp] = None) -> AsyncIterator[OrderDeskApp]:
    """
    Application lifespan manager.

    Usage:
        async with lifespan() as app:
            await app.auth.login(email, password)
    """
    app = app or OrderDeskApp()
    setup_logging(app.config)

    logger.info("🚀 Starting OrderDesk client...")
    try:
        validate_settings(app.config)
        logger.info("✅ Configuration validated")

        await app.start()
        logger.info(f"Session state: {app.auth.state.value}")
        logger.info(f"Environment: {app.config.ENVIRONMENT}")
    except Exception as e:
        logger.critical(f"Failed to start client: {str(e)}", exc_info=True)
        await app.close()
        raise

    try:
        yield app
    finally:
        logger.info("🛑 Shutting down OrderDesk client...")
        await app.close()
        logger.info("👋 OrderDesk client shut down")
