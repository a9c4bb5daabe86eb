"""
SessionCoordinator - owns the login state of a reading client.

Example:
    >>> async with SessionCoordinator(credential_store=SQLiteCredentialStore("reader")) as session:
    ...     if session.has_stored_credentials:
    ...         result = await session.login_with_saved_credentials()
    ...     else:
    ...         result = await session.login("Alice", "secret")
    ...     print(session.logged_in_username)
"""
import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, List, Optional, Tuple, Union
from urllib.parse import urlparse

from .core.api import (
    APIConfig,
    AsyncAPIClient,
    TokenFetcher,
    AccountLogin,
    CurrentUserFetcher,
    ServerLogout,
    EventEmitter,
    TokenType,
    LoginResult,
    AlreadyLoggedIn,
)
from .core.cache import MemoryCache
from .core.cookies import AiohttpCookieStore
from .core.credentials import CredentialStore, MemoryCredentialStore, PresentCredentials
from .core.exceptions import (
    WikiSessionError,
    SiteResolutionError,
    ConnectivityError,
    CurrentUserFetchError,
    MissingCredentialsError,
)
from .core.logging import get_logger
from .core.preferences import MemoryPreferences, DID_SHOW_ENABLE_SYNC_PANEL
from .core.protocols import (
    TokenFetcherProtocol,
    AccountLoginProtocol,
    CurrentUserFetcherProtocol,
    ServerLogoutProtocol,
    CookieStore,
    SyncController,
    MemoryCacheProtocol,
    Preferences,
)
from .core.state import SessionState
from .core.sync import ReadingListSyncController


SavedLoginResult = Union[LoginResult, AlreadyLoggedIn]


class SessionCoordinator:
    """
    Orchestrates login, saved-credential reuse and logout.

    One instance owns one ``SessionState``; pass the coordinator to the
    code that needs to know who is logged in instead of reaching for a
    global. Public workflows are serialized by a per-instance lock, so
    concurrent callers run one after another.

    Every collaborator can be injected. Missing ones are built on
    ``start()`` (or on first use) around a shared ``AsyncAPIClient``.

    Events (see ``on``):
        - ``login_state_changed(is_logged_in: bool)``
        - ``login(result: LoginResult)``
        - ``already_logged_in(result: AlreadyLoggedIn)``
        - ``logout()``
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        *,
        credential_store: Optional[CredentialStore] = None,
        token_fetcher: Optional[TokenFetcherProtocol] = None,
        account_login: Optional[AccountLoginProtocol] = None,
        current_user_fetcher: Optional[CurrentUserFetcherProtocol] = None,
        server_logout: Optional[ServerLogoutProtocol] = None,
        cookie_store: Optional[CookieStore] = None,
        sync_controller: Optional[SyncController] = None,
        memory_cache: Optional[MemoryCacheProtocol] = None,
        preferences: Optional[Preferences] = None,
        api_client: Optional[AsyncAPIClient] = None
    ):
        """
        Initialize the coordinator.

        Args:
            config: API configuration (language, site, timeouts)
            credential_store: Saved credentials (in-memory if not provided)
            token_fetcher: Token endpoint
            account_login: Account-login endpoint
            current_user_fetcher: Current-user endpoint
            server_logout: Logout endpoint
            cookie_store: Cookie storage shared with the HTTP client
            sync_controller: Reading-list sync switch
            memory_cache: Cache cleared whenever the user changes
            preferences: Onboarding flags (the credential store is used
                if it supports flags)
            api_client: HTTP client used to build missing endpoints
        """
        self._config = config or APIConfig.default()
        self._logger = get_logger('wikisession.coordinator')

        self._credentials: CredentialStore = credential_store or MemoryCredentialStore()
        self._tokens = token_fetcher
        self._account_login = account_login
        self._current_user = current_user_fetcher
        self._server_logout = server_logout
        self._cookies = cookie_store
        self._sync: SyncController = sync_controller or ReadingListSyncController()
        self._cache: MemoryCacheProtocol = memory_cache or MemoryCache()
        if preferences is None:
            preferences = (
                self._credentials if isinstance(self._credentials, Preferences)
                else MemoryPreferences()
            )
        self._preferences: Preferences = preferences

        self._api = api_client
        self._owns_api = False
        self._started = False
        self._closed = False
        self._lock = asyncio.Lock()

        self._events = EventEmitter('wikisession.coordinator')
        self._state = SessionState()
        self._state.add_observer(self._on_login_state_changed)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> 'SessionCoordinator':
        """
        Build the collaborators that were not injected.

        Returns:
            Self for chaining
        """
        if self._closed:
            raise WikiSessionError("Coordinator is closed")
        if self._started:
            return self

        if self._cookies is None:
            self._cookies = AiohttpCookieStore()

        endpoints = (self._tokens, self._account_login, self._current_user, self._server_logout)
        if self._api is None and any(endpoint is None for endpoint in endpoints):
            jar = self._cookies.jar if isinstance(self._cookies, AiohttpCookieStore) else None
            self._api = AsyncAPIClient(self._config, cookie_jar=jar)
            self._owns_api = True

        self._tokens = self._tokens or TokenFetcher(self._api)
        self._account_login = self._account_login or AccountLogin(self._api)
        self._current_user = self._current_user or CurrentUserFetcher(self._api)
        self._server_logout = self._server_logout or ServerLogout(self._api)

        self._started = True
        return self

    async def close(self) -> None:
        """Release the HTTP client (if owned) and the credential store."""
        if self._closed:
            return
        self._closed = True

        if self._owns_api and self._api is not None:
            await self._api.close()
            self._api = None

        self._credentials.close()

    async def __aenter__(self) -> 'SessionCoordinator':
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # =========================================================================
    # State
    # =========================================================================

    @property
    def config(self) -> APIConfig:
        return self._config

    @property
    def session_state(self) -> SessionState:
        return self._state

    @property
    def is_logged_in(self) -> bool:
        """True iff a username is set in the session state."""
        return self._state.is_logged_in

    @property
    def logged_in_username(self) -> Optional[str]:
        """Server-normalized name of the logged-in user, if any."""
        return self._state.username

    @property
    def has_stored_credentials(self) -> bool:
        """True iff a non-empty username and password are saved."""
        return self._credentials.load().is_present

    @property
    def cookie_store(self) -> Optional[CookieStore]:
        return self._cookies

    @property
    def sync_controller(self) -> SyncController:
        return self._sync

    @property
    def memory_cache(self) -> MemoryCacheProtocol:
        return self._cache

    def on(self, event: str, callback: Callable) -> 'SessionCoordinator':
        """Register an event handler."""
        self._events.on(event, callback)
        return self

    def off(self, event: str, callback: Optional[Callable] = None) -> 'SessionCoordinator':
        """Remove an event handler."""
        self._events.off(event, callback)
        return self

    def login_site(self) -> str:
        """
        Site the credentials apply to.

        The stored host wins; otherwise the configured default site.

        Raises:
            SiteResolutionError: If neither is available
        """
        host = self._credentials.load().host
        if host:
            return f"https://{host}"

        site = self._config.default_site
        if site is None:
            raise SiteResolutionError("No stored host and no default site configured")
        return site

    # =========================================================================
    # Workflows
    # =========================================================================

    async def login(
        self,
        username: str,
        password: str,
        retype_password: Optional[str] = None,
        second_factor_token: Optional[str] = None,
        captcha_id: Optional[str] = None,
        captcha_answer: Optional[str] = None,
        *,
        timeout: Optional[float] = None
    ) -> LoginResult:
        """
        Log in with a username and password.

        Args:
            username: Username as typed by the user
            password: Password
            retype_password: New password confirmation (password change flow)
            second_factor_token: Two-factor code
            captcha_id: Captcha id from a previous captcha-required failure
            captcha_answer: Captcha answer
            timeout: Seconds before the attempt is cancelled
                (defaults to ``TimeoutConfig.operation``)

        Returns:
            LoginResult; ``username`` is the server-normalized name

        Raises:
            SiteResolutionError: No site to log in to
            TokenFetchError: The login token could not be obtained
            AccountLoginError: The server refused the login
            ConnectivityError: The site is unreachable
            asyncio.TimeoutError: The timeout expired
        """
        return await self._run(
            partial(
                self._login,
                username,
                password,
                retype_password,
                second_factor_token,
                captcha_id,
                captcha_answer
            ),
            timeout
        )

    async def login_with_saved_credentials(
        self,
        *,
        timeout: Optional[float] = None
    ) -> SavedLoginResult:
        """
        Log in using the saved credentials.

        If the server still holds a session for this client, the user is
        marked as logged in without resubmitting credentials. Otherwise the
        saved credentials are submitted once; if that fails for any reason
        other than lost connectivity, the user is logged out locally.

        Args:
            timeout: Seconds before the attempt is cancelled

        Returns:
            AlreadyLoggedIn if the server session was still valid,
            LoginResult if the credentials were resubmitted

        Raises:
            MissingCredentialsError: No saved username/password
            ConnectivityError: The site is unreachable (credentials kept)
            TokenFetchError / AccountLoginError: The resubmission failed
                (local state has been wiped)
        """
        return await self._run(self._login_with_saved_credentials, timeout)

    async def logout(self, completion: Optional[Callable[[], Any]] = None) -> None:
        """
        Log out locally.

        Clears saved username/password, session state, cookies and the
        memory cache, disables reading-list sync without deleting any
        lists and resets the sync onboarding flag. Never raises.

        Also works on a closed coordinator, where it only wipes local state.

        Args:
            completion: Called after every step has finished
        """
        async with self._lock:
            if not self._closed:
                await self._ensure_started()
            self._reset_local_state()

        if completion is not None:
            completion()

    async def reset_server_session(
        self,
        *,
        timeout: Optional[float] = None
    ) -> Optional[SavedLoginResult]:
        """
        Log out on the server, then log back in with saved credentials.

        Deletes server-side login tokens and browser cookies. Failures are
        logged, not raised.

        Returns:
            Result of the saved-credential login, or None on failure
        """
        try:
            return await self._run(self._reset_server_session, timeout)
        except asyncio.TimeoutError:
            self._logger.info("Server session reset timed out")
            return None

    # =========================================================================
    # Internals (run with the lock held)
    # =========================================================================

    async def _run(self, operation: Callable[[], Awaitable[Any]], timeout: Optional[float]) -> Any:
        """Run a workflow under the lock, bounded by a timeout."""
        async def locked():
            async with self._lock:
                await self._ensure_started()
                return await operation()

        if timeout is None:
            timeout = self._config.timeout.operation
        return await asyncio.wait_for(locked(), timeout)

    async def _ensure_started(self) -> None:
        if not self._started:
            await self.start()

    async def _login(
        self,
        username: str,
        password: str,
        retype_password: Optional[str] = None,
        second_factor_token: Optional[str] = None,
        captcha_id: Optional[str] = None,
        captcha_answer: Optional[str] = None
    ) -> LoginResult:
        site = self.login_site()
        self._logger.info(f"Logging in to {site}")

        token = await self._tokens.fetch_token(TokenType.LOGIN, site)
        result = await self._account_login.login(
            username,
            password,
            token,
            site,
            retype_password=retype_password,
            second_factor_token=second_factor_token,
            captcha_id=captcha_id,
            captcha_answer=captcha_answer
        )

        # No awaits below: a cancelled login never leaves partial state
        self._apply_login(result.username, password, site)
        self._events.emit('login', result)
        self._logger.info(f"Logged in as {result.username}")
        return result

    def _apply_login(self, username: str, password: str, site: str) -> None:
        # Credentials are persisted before observers and caches see the change
        self._credentials.save(PresentCredentials(
            username=username,
            password=password,
            host=urlparse(site).hostname
        ))
        self._state.set_username(username)
        self._reconcile_cookies()
        self._cache.clear()

    async def _login_with_saved_credentials(self) -> SavedLoginResult:
        credentials = self._credentials.load()
        if not isinstance(credentials, PresentCredentials):
            raise MissingCredentialsError()

        site = self.login_site()

        try:
            identity = await self._current_user.fetch(site)
        except (CurrentUserFetchError, ConnectivityError) as e:
            self._logger.info(f"Current user check failed: {e}")
            identity = None

        if identity is not None:
            self._state.set_username(identity.name)
            result = AlreadyLoggedIn(identity)
            self._events.emit('already_logged_in', result)
            self._logger.info(f"User {identity.name} is already logged in")
            return result

        self._state.clear()

        try:
            return await self._login(credentials.username, credentials.password)
        except ConnectivityError:
            self._logger.info("Saved credential login failed: no connectivity, keeping credentials")
            raise
        except Exception as e:
            self._logger.info(f"Saved credential login failed, logging out: {e}")
            self._reset_local_state()
            raise

    async def _reset_server_session(self) -> Optional[SavedLoginResult]:
        try:
            site = self.login_site()
            token = await self._tokens.fetch_token(TokenType.CSRF, site)
            await self._server_logout.logout(token, site)
        except WikiSessionError as e:
            self._logger.info(f"Failed to log out, delete login tokens and other browser cookies: {e}")
            return None

        self._logger.info("Successfully logged out, deleted login tokens and other browser cookies")

        try:
            result = await self._login_with_saved_credentials()
        except WikiSessionError as e:
            self._logger.info(f"Login with saved credentials failed with error {e}")
            return None

        if isinstance(result, AlreadyLoggedIn):
            self._logger.info(f"User {result.username} is already logged in")
        else:
            self._logger.info(f"Successfully logged in with saved credentials for user {result.username}")
        return result

    def _cookie_pairs(self) -> List[Tuple[str, str]]:
        """(session cookie, user cookie used as template) pairs."""
        language = self._config.language_code
        if not language:
            return []
        return [
            (f"{language}wikiSession", f"{language}wikiUserID"),
            ("centralauth_Session", "centralauth_User"),
        ]

    def _reconcile_cookies(self) -> None:
        """Give session cookies the lifetime of the matching user cookies."""
        for name, template in self._cookie_pairs():
            try:
                self._cookies.recreate(name, template)
            except Exception:
                self._logger.exception(f"Failed to recreate cookie {name}")

    def _reset_local_state(self) -> None:
        steps = [
            ('credentials', self._credentials.clear),
            ('session state', self._state.clear),
        ]
        # No cookie store before the first start()
        if self._cookies is not None:
            steps.append(('cookies', self._cookies.delete_all))
        steps += [
            ('memory cache', self._cache.clear),
            ('reading list sync', partial(
                self._sync.set_sync_enabled, False, delete_local=False, delete_remote=False
            )),
            ('onboarding flags', partial(
                self._preferences.set_flag, DID_SHOW_ENABLE_SYNC_PANEL, False
            )),
        ]

        # Local cleanup must run to the end
        for name, step in steps:
            try:
                step()
            except Exception:
                self._logger.exception(f"Failed to reset {name} during logout")

        self._events.emit('logout')
        self._logger.info("Logged out")

    def _on_login_state_changed(self, is_logged_in: bool) -> None:
        self._sync.is_logged_in = is_logged_in
        self._events.emit('login_state_changed', is_logged_in)
