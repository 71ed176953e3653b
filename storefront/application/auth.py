"""Use cases: log in (persisting the session) and log out."""
from __future__ import annotations

import logging

from storefront.core.exceptions import BackendError, TransportError
from storefront.core.navigation import HOME_PATH, Navigator
from storefront.core.notifications import WARNING_DURATION_MS, NotificationSink, Severity
from storefront.core.sentry_integration import set_user
from storefront.domain.address_selection import AddressSelector
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.session_store import SessionStore, TOKEN_KEY, persist_login

logger = logging.getLogger(__name__)

LOGIN_SUCCESS_MESSAGE = "Logged in successfully"
USERNAME_REQUIRED_MESSAGE = "Username is a required field"
PASSWORD_REQUIRED_MESSAGE = "Password is a required field"
LOGIN_FAILED_MESSAGE = (
    "Something went wrong. Check that the backend is running, "
    "reachable and returns valid JSON."
)


class AuthFlow:
    def __init__(
        self,
        client: StorefrontApiClient,
        session_store: SessionStore,
        notifier: NotificationSink,
        navigator: Navigator,
        selector: AddressSelector | None = None,
    ) -> None:
        self.client = client
        self.session_store = session_store
        self.notifier = notifier
        self.navigator = navigator
        self.selector = selector

    async def _validate_input(self, username: str, password: str) -> bool:
        if not username:
            await self.notifier.notify(USERNAME_REQUIRED_MESSAGE, Severity.WARNING, WARNING_DURATION_MS)
            return False
        if not password:
            await self.notifier.notify(PASSWORD_REQUIRED_MESSAGE, Severity.WARNING, WARNING_DURATION_MS)
            return False
        return True

    async def login(self, username: str, password: str) -> bool:
        if not await self._validate_input(username, password):
            return False

        try:
            response = await self.client.login(username, password)
        except BackendError as exc:
            # Only 400 carries a user-facing reason (bad credentials)
            message = exc.message if exc.status == 400 else LOGIN_FAILED_MESSAGE
            await self.notifier.notify(message, Severity.ERROR, WARNING_DURATION_MS)
            return False
        except TransportError:
            await self.notifier.notify(LOGIN_FAILED_MESSAGE, Severity.ERROR, WARNING_DURATION_MS)
            return False

        persist_login(self.session_store, response.token, response.username, response.balance)
        set_user(response.username)
        logger.info("user %s logged in", response.username)

        await self.notifier.notify(LOGIN_SUCCESS_MESSAGE, Severity.SUCCESS, WARNING_DURATION_MS)
        self.navigator.push(HOME_PATH, {"from": "Login"})
        return True

    def is_logged_in(self) -> bool:
        return bool(self.session_store.get(TOKEN_KEY))

    def logout(self) -> None:
        self.session_store.clear()
        if self.selector is not None:
            self.selector.clear()
        set_user(None)
        self.navigator.push(HOME_PATH)
