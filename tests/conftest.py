"""Pytest fixtures for wikisession tests."""
import pytest
from unittest.mock import Mock, AsyncMock

from wikisession import (
    APIConfig,
    SessionCoordinator,
    MemoryCredentialStore,
    MemoryCache,
    MemoryPreferences,
    ReadingListSyncController,
    LoginToken,
    LoginResult,
    TokenType,
)


@pytest.fixture
def config():
    """Default configuration (en.wikipedia.org)."""
    return APIConfig.default()


@pytest.fixture
def credential_store():
    """Empty in-memory credential store."""
    return MemoryCredentialStore()


@pytest.fixture
def token_fetcher():
    """Token endpoint returning a fixed login token."""
    fetcher = Mock()
    fetcher.fetch_token = AsyncMock(
        side_effect=lambda token_type, site: LoginToken('token+\\', TokenType(token_type))
    )
    return fetcher


@pytest.fixture
def account_login():
    """Account-login endpoint that normalizes every username to 'Alice'."""
    login = Mock()
    login.login = AsyncMock(return_value=LoginResult(username='Alice'))
    return login


@pytest.fixture
def current_user_fetcher():
    """Current-user endpoint reporting an anonymous session."""
    fetcher = Mock()
    fetcher.fetch = AsyncMock(return_value=None)
    return fetcher


@pytest.fixture
def server_logout():
    """Logout endpoint that always succeeds."""
    logout = Mock()
    logout.logout = AsyncMock(return_value=None)
    return logout


@pytest.fixture
def cookie_store():
    """Cookie store mock."""
    store = Mock()
    store.recreate.return_value = True
    return store


@pytest.fixture
def sync_controller():
    """Reading list sync, initially enabled."""
    return ReadingListSyncController(enabled=True)


@pytest.fixture
def memory_cache():
    """Cache with one identity-dependent entry."""
    cache = MemoryCache()
    cache.set('watchlist', ['Main Page'])
    return cache


@pytest.fixture
def preferences():
    """Preferences with the sync panel already shown."""
    prefs = MemoryPreferences()
    prefs.set_flag('did_show_enable_sync_panel', True)
    return prefs


@pytest.fixture
def coordinator(
    config,
    credential_store,
    token_fetcher,
    account_login,
    current_user_fetcher,
    server_logout,
    cookie_store,
    sync_controller,
    memory_cache,
    preferences
):
    """Coordinator with every collaborator injected."""
    return SessionCoordinator(
        config,
        credential_store=credential_store,
        token_fetcher=token_fetcher,
        account_login=account_login,
        current_user_fetcher=current_user_fetcher,
        server_logout=server_logout,
        cookie_store=cookie_store,
        sync_controller=sync_controller,
        memory_cache=memory_cache,
        preferences=preferences
    )
