"""
Protocol definitions for the session coordinator's collaborators.

Defines interfaces (protocols) for dependency injection. Concrete
implementations live in ``core.api``, ``core.cookies``, ``core.sync``,
``core.cache`` and ``core.preferences``; tests swap in mocks.
"""
from typing import Protocol, Optional, Union, Callable, runtime_checkable

from .api.models import LoginToken, LoginResult, TokenType, UserIdentity


# Called with the new logged-in flag whenever it changes
LoginStateObserver = Callable[[bool], None]


class TokenFetcherProtocol(Protocol):
    """Fetches short-lived tokens from a site."""
    
    async def fetch_token(
        self,
        token_type: Union[TokenType, str],
        site: str
    ) -> LoginToken:
        ...


class AccountLoginProtocol(Protocol):
    """Submits credentials to the account-login endpoint."""
    
    async def login(
        self,
        username: str,
        password: str,
        token: LoginToken,
        site: str,
        retype_password: Optional[str] = None,
        second_factor_token: Optional[str] = None,
        captcha_id: Optional[str] = None,
        captcha_answer: Optional[str] = None
    ) -> LoginResult:
        ...


class CurrentUserFetcherProtocol(Protocol):
    """Reports who the server session belongs to (None when anonymous)."""
    
    async def fetch(self, site: str) -> Optional[UserIdentity]:
        ...


class ServerLogoutProtocol(Protocol):
    """Ends the session on the server."""
    
    async def logout(self, token: LoginToken, site: str) -> None:
        ...


@runtime_checkable
class CookieStore(Protocol):
    """Cookie storage the session cookies live in."""
    
    def delete_all(self) -> None:
        """Delete every stored cookie."""
        ...
    
    def recreate(self, name: str, template_name: str) -> bool:
        """
        Re-issue cookie ``name`` with the lifetime of ``template_name``.
        
        Returns:
            True if both cookies existed and the cookie was recreated
        """
        ...


@runtime_checkable
class SyncController(Protocol):
    """Cross-device sync switch for reading lists."""
    
    is_logged_in: bool
    
    def set_sync_enabled(
        self,
        enabled: bool,
        delete_local: bool = False,
        delete_remote: bool = False
    ) -> None:
        ...


@runtime_checkable
class MemoryCacheProtocol(Protocol):
    """In-memory cache whose content depends on who is logged in."""
    
    def clear(self) -> None:
        ...


@runtime_checkable
class Preferences(Protocol):
    """Boolean user preferences such as one-time onboarding flags."""
    
    def get_flag(self, name: str, default: bool = False) -> bool:
        ...
    
    def set_flag(self, name: str, value: bool) -> None:
        ...
