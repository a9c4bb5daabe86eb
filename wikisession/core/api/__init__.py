"""MediaWiki API module."""
from .errors import MediaWikiAPIError, LoginMessageCodes
from .events import EventEmitter
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .async_client import AsyncAPIClient
from .models import (
    TokenType,
    LoginToken,
    LoginResult,
    UserIdentity,
    AlreadyLoggedIn,
    CaptchaChallenge,
)
from .tokens import TokenFetcher
from .account_login import AccountLogin
from .current_user import CurrentUserFetcher
from .logout import ServerLogout

__all__ = [
    # Client
    'AsyncAPIClient',
    
    # Endpoints
    'TokenFetcher',
    'AccountLogin',
    'CurrentUserFetcher',
    'ServerLogout',
    
    # Models
    'TokenType',
    'LoginToken',
    'LoginResult',
    'UserIdentity',
    'AlreadyLoggedIn',
    'CaptchaChallenge',
    
    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    
    # Errors
    'MediaWikiAPIError',
    'LoginMessageCodes',
    
    # Events
    'EventEmitter',
]
