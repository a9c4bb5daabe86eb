"""MediaWiki API error payloads and clientlogin message codes."""
from typing import Dict, Optional

from ...exceptions import WikiSessionError, LoginFailureReason


class LoginMessageCodes:
    """Maps clientlogin ``messagecode`` values to failure reasons."""
    
    REASONS: Dict[str, LoginFailureReason] = {
        'wrongpassword': LoginFailureReason.INVALID_CREDENTIALS,
        'wrongpasswordempty': LoginFailureReason.INVALID_CREDENTIALS,
        'nosuchuser': LoginFailureReason.INVALID_CREDENTIALS,
        'noname': LoginFailureReason.INVALID_CREDENTIALS,
        'authmanager-authn-no-primary': LoginFailureReason.INVALID_CREDENTIALS,
        'oathauth-auth-ui': LoginFailureReason.SECOND_FACTOR_REQUIRED,
        'oathauth-login-failed': LoginFailureReason.WRONG_SECOND_FACTOR,
        'resetpass-temp-emailed': LoginFailureReason.PASSWORD_CHANGE_REQUIRED,
        'resetpass-expired': LoginFailureReason.PASSWORD_CHANGE_REQUIRED,
        'resetpass-expired-soft': LoginFailureReason.PASSWORD_CHANGE_REQUIRED,
        'login-throttled': LoginFailureReason.THROTTLED,
        'captcha-error': LoginFailureReason.CAPTCHA_REQUIRED,
        'captcha-createaccount-fail': LoginFailureReason.CAPTCHA_REQUIRED,
    }
    
    # clientlogin UI request ids
    REQUEST_REASONS: Dict[str, LoginFailureReason] = {
        'TOTPAuthenticationRequest': LoginFailureReason.SECOND_FACTOR_REQUIRED,
        'CaptchaAuthenticationRequest': LoginFailureReason.CAPTCHA_REQUIRED,
    }
    
    @classmethod
    def get_reason(cls, code: Optional[str]) -> LoginFailureReason:
        """Gets failure reason for a message code."""
        if not code:
            return LoginFailureReason.UNKNOWN
        if code in cls.REASONS:
            return cls.REASONS[code]
        if 'captcha' in code:
            return LoginFailureReason.CAPTCHA_REQUIRED
        return LoginFailureReason.UNKNOWN
    
    @classmethod
    def get_request_reason(cls, request_id: str) -> Optional[LoginFailureReason]:
        """Gets failure reason implied by a UI request id (namespaced or not)."""
        short_id = request_id.rsplit('\\', 1)[-1]
        return cls.REQUEST_REASONS.get(short_id)


class MediaWikiAPIError(WikiSessionError):
    """Exception raised for ``error`` payloads and unusable responses."""
    
    def __init__(self, code: str, info: str = '', status: Optional[int] = None):
        self.info = info
        self.status = status
        super().__init__(f"{code}: {info}" if info else code, code)
