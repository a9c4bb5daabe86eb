"""
wikisession - Async login/session coordinator for MediaWiki reading clients.

Usage:
    >>> from wikisession import SessionCoordinator, SQLiteCredentialStore
    >>> 
    >>> async with SessionCoordinator(credential_store=SQLiteCredentialStore("reader")) as session:
    ...     await session.login("Alice", "secret")
    ...     print(session.logged_in_username)
"""
import logging
from .coordinator import SessionCoordinator, SavedLoginResult

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    AsyncAPIClient,
    TokenFetcher,
    AccountLogin,
    CurrentUserFetcher,
    ServerLogout,
    TokenType,
    LoginToken,
    LoginResult,
    UserIdentity,
    AlreadyLoggedIn,
    CaptchaChallenge,
)

# Credential storage
from .core.credentials import (
    Credentials,
    PresentCredentials,
    AbsentCredentials,
    CredentialStore,
    MemoryCredentialStore,
    SQLiteCredentialStore,
)

from .core.cookies import AiohttpCookieStore
from .core.cache import MemoryCache
from .core.sync import ReadingListSyncController
from .core.preferences import MemoryPreferences
from .core.state import SessionState

# Errors
from .core.exceptions import (
    WikiSessionError,
    SiteResolutionError,
    ConnectivityError,
    TokenFetchError,
    AccountLoginError,
    LoginFailureReason,
    CurrentUserFetchError,
    MissingCredentialsError,
    ServerLogoutError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for wikisession modules.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'wikisession',
        'wikisession.api',
        'wikisession.api.login',
        'wikisession.coordinator',
        'wikisession.cookies',
        'wikisession.state',
        'wikisession.sync',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'SessionCoordinator',
    'SavedLoginResult',
    'SessionState',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AsyncAPIClient',
    'TokenFetcher',
    'AccountLogin',
    'CurrentUserFetcher',
    'ServerLogout',
    'TokenType',
    'LoginToken',
    'LoginResult',
    'UserIdentity',
    'AlreadyLoggedIn',
    'CaptchaChallenge',
    'Credentials',
    'PresentCredentials',
    'AbsentCredentials',
    'CredentialStore',
    'MemoryCredentialStore',
    'SQLiteCredentialStore',
    'AiohttpCookieStore',
    'MemoryCache',
    'ReadingListSyncController',
    'MemoryPreferences',
    'WikiSessionError',
    'SiteResolutionError',
    'ConnectivityError',
    'TokenFetchError',
    'AccountLoginError',
    'LoginFailureReason',
    'CurrentUserFetchError',
    'MissingCredentialsError',
    'ServerLogoutError',
    'setup_logging',
]
