"""
Exceptions raised by the session workflow.

Every error a collaborator raises reaches the caller unchanged; the
coordinator only inspects them to decide whether a failed saved-credential
retry should wipe local state.
"""
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .api.models import CaptchaChallenge


class WikiSessionError(Exception):
    """Base exception for all wikisession errors."""
    
    def __init__(self, message: str, code: Optional[str] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            code: Server error code (if available)
        """
        self.code = code
        super().__init__(message)


class SiteResolutionError(WikiSessionError):
    """Raised when neither a stored host nor a default site is available."""
    pass


class ConnectivityError(WikiSessionError):
    """
    Raised when the site cannot be reached at all.
    
    Kept apart from login failures: a saved session must survive a
    transient loss of network.
    """
    pass


class TokenFetchError(WikiSessionError):
    """Raised when the site refuses to hand out a token."""
    pass


class CurrentUserFetchError(WikiSessionError):
    """Raised when the current-user query fails."""
    pass


class MissingCredentialsError(WikiSessionError):
    """Raised when no saved username/password pair is available."""
    
    def __init__(self, message: str = "No saved username and password") -> None:
        super().__init__(message, code='blank-username-or-password')


class ServerLogoutError(WikiSessionError):
    """Raised when the server rejects a logout request."""
    pass


class LoginFailureReason(Enum):
    """Why the account-login endpoint refused a login."""
    
    INVALID_CREDENTIALS = 'invalid-credentials'
    CAPTCHA_REQUIRED = 'captcha-required'
    SECOND_FACTOR_REQUIRED = 'second-factor-required'
    WRONG_SECOND_FACTOR = 'wrong-second-factor'
    PASSWORD_CHANGE_REQUIRED = 'password-change-required'
    THROTTLED = 'throttled'
    UNKNOWN = 'unknown'


class AccountLoginError(WikiSessionError):
    """Exception raised when the server refuses a login submission."""
    
    def __init__(
        self,
        reason: LoginFailureReason,
        message: str,
        code: Optional[str] = None,
        captcha: Optional['CaptchaChallenge'] = None
    ) -> None:
        """
        Initialize the exception.
        
        Args:
            reason: Classified failure reason
            message: Server-provided message
            code: Server message code (e.g. 'wrongpassword')
            captcha: Captcha to solve before retrying (if any)
        """
        self.reason = reason
        self.captcha = captcha
        super().__init__(message, code)
    
    @property
    def needs_captcha(self) -> bool:
        return self.reason is LoginFailureReason.CAPTCHA_REQUIRED
    
    @property
    def needs_second_factor(self) -> bool:
        return self.reason is LoginFailureReason.SECOND_FACTOR_REQUIRED
