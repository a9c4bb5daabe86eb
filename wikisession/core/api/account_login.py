"""
Account login via ``action=clientlogin``.

The endpoint answers every submission with a status:

- ``PASS``: logged in, ``username`` holds the normalized name
- ``FAIL``: refused, ``messagecode`` tells why
- ``UI``: more input is needed (second factor, captcha, new password)
- ``REDIRECT`` / ``RESTART``: flows this client does not support
"""
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin

from .async_client import AsyncAPIClient
from .errors import MediaWikiAPIError, LoginMessageCodes
from .models import CaptchaChallenge, LoginResult, LoginToken
from ..exceptions import AccountLoginError, LoginFailureReason
from ..logging import get_logger

logger = get_logger('wikisession.api.login')


class AccountLogin:
    """Submits credentials to the account-login endpoint."""
    
    def __init__(self, client: AsyncAPIClient):
        self._client = client
    
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
        """
        Submit a login.
        
        Args:
            username: Username as typed by the user
            password: Password
            token: Login token fetched from the same site
            site: Site URL
            retype_password: New password confirmation (password change flow)
            second_factor_token: Two-factor code
            captcha_id: Captcha id from a previous CAPTCHA_REQUIRED failure
            captcha_answer: Captcha answer
            
        Returns:
            LoginResult with the server-normalized username
            
        Raises:
            AccountLoginError: If the server refuses the login
            ConnectivityError: If the site is unreachable
        """
        fields = {
            'action': 'clientlogin',
            'username': username,
            'password': password,
            'logintoken': token.value,
            'loginreturnurl': site,
            'rememberMe': '1',
            'retype': retype_password,
            'OATHToken': second_factor_token,
            'captchaId': captcha_id,
            'captchaWord': captcha_answer,
        }
        
        try:
            data = await self._client.post(site, fields)
        except MediaWikiAPIError as e:
            raise AccountLoginError(LoginFailureReason.UNKNOWN, str(e), e.code) from e
        
        response = data.get('clientlogin') or {}
        status = response.get('status')
        
        if status == 'PASS':
            return LoginResult(
                username=response.get('username') or username,
                status=status,
                message=response.get('message')
            )
        
        reason, captcha = self._classify(response, site)
        message = response.get('message') or f"Login failed with status {status}"
        logger.info(f"Login refused ({status}, {response.get('messagecode')}): {reason.value}")
        raise AccountLoginError(reason, message, response.get('messagecode'), captcha)
    
    def _classify(
        self,
        response: Dict[str, Any],
        site: str
    ) -> Tuple[LoginFailureReason, Optional[CaptchaChallenge]]:
        """Work out why a non-PASS response was returned."""
        requests: List[Dict[str, Any]] = response.get('requests') or []
        captcha = self._find_captcha(requests, site)
        reason = LoginMessageCodes.get_reason(response.get('messagecode'))
        
        if reason is LoginFailureReason.UNKNOWN and response.get('status') == 'UI':
            for request in requests:
                request_reason = LoginMessageCodes.get_request_reason(request.get('id', ''))
                if request_reason is not None:
                    reason = request_reason
                    break
                if 'retype' in (request.get('fields') or {}):
                    reason = LoginFailureReason.PASSWORD_CHANGE_REQUIRED
                    break
        
        if reason is LoginFailureReason.UNKNOWN and captcha is not None:
            reason = LoginFailureReason.CAPTCHA_REQUIRED
        
        return reason, captcha
    
    @staticmethod
    def _find_captcha(requests: List[Dict[str, Any]], site: str) -> Optional[CaptchaChallenge]:
        for request in requests:
            fields = request.get('fields') or {}
            captcha_id = (fields.get('captchaId') or {}).get('value')
            if not captcha_id:
                continue
            info = (fields.get('captchaInfo') or {}).get('value')
            url = urljoin(site.rstrip('/') + '/', info) if info else None
            return CaptchaChallenge(captcha_id=str(captcha_id), url=url)
        return None
