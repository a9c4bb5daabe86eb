"""
API data models.

Contains data classes for values exchanged with the MediaWiki API.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class TokenType(Enum):
    """Token types understood by ``meta=tokens``."""
    LOGIN = 'login'
    CSRF = 'csrf'


@dataclass(frozen=True)
class LoginToken:
    """
    Short-lived token authorizing a single submission.
    
    Never persisted.
    """
    value: str
    type: TokenType = TokenType.LOGIN
    
    def __repr__(self) -> str:
        return f"LoginToken(type={self.type.value}, value=<hidden>)"


@dataclass(frozen=True)
class LoginResult:
    """
    Successful login result.
    
    Attributes:
        username: Username as normalized by the server. May differ in
            case or form from the submitted username.
        status: Raw clientlogin status (always 'PASS')
        message: Optional server message
    """
    username: str
    status: str = 'PASS'
    message: Optional[str] = None


@dataclass(frozen=True)
class UserIdentity:
    """Identity reported by the current-user endpoint."""
    name: str
    user_id: int = 0
    groups: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AlreadyLoggedIn:
    """Returned when the server already holds a session for the saved user."""
    identity: UserIdentity
    
    @property
    def username(self) -> str:
        return self.identity.name


@dataclass(frozen=True)
class CaptchaChallenge:
    """Captcha the user must solve before the login can be retried."""
    captcha_id: str
    url: Optional[str] = None
