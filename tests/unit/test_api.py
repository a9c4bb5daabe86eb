"""Tests for the MediaWiki API client and endpoints."""
import asyncio
import pytest
import aiohttp
from unittest.mock import Mock, AsyncMock, MagicMock

from wikisession.core.api import (
    AsyncAPIClient,
    APIConfig,
    TokenFetcher,
    AccountLogin,
    CurrentUserFetcher,
    ServerLogout,
    TokenType,
    LoginToken,
    UserIdentity,
    MediaWikiAPIError,
    LoginMessageCodes,
)
from wikisession.core.exceptions import (
    AccountLoginError,
    ConnectivityError,
    CurrentUserFetchError,
    LoginFailureReason,
    ServerLogoutError,
    TokenFetchError,
)

SITE = "https://en.wikipedia.org"


@pytest.fixture
def client():
    """API client with get/post mocked out."""
    api = AsyncAPIClient()
    api.get = AsyncMock()
    api.post = AsyncMock()
    return api


def mock_session(
    text: str = '{}',
    status: int = 200,
    error: Exception = None,
    read_error: Exception = None
):
    """aiohttp session whose request() yields a canned response."""
    response = Mock()
    response.status = status
    if read_error is not None:
        response.text = AsyncMock(side_effect=read_error)
    else:
        response.text = AsyncMock(return_value=text)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = Mock()
    if error is not None:
        session.request = Mock(side_effect=error)
    else:
        session.request = Mock(return_value=context)
    return session


class TestAsyncAPIClient:
    """Test suite for AsyncAPIClient."""

    def test_api_url(self):
        """Test api.php URL building."""
        api = AsyncAPIClient()

        assert api.api_url("https://en.wikipedia.org/") == "https://en.wikipedia.org/w/api.php"

    def test_api_url_custom_path(self):
        """Test a custom API path."""
        api = AsyncAPIClient(APIConfig(api_path="/api.php"))

        assert api.api_url(SITE) == "https://en.wikipedia.org/api.php"

    @pytest.mark.asyncio
    async def test_get_adds_format_and_drops_none(self):
        """Test JSON format parameters are added and unset fields removed."""
        api = AsyncAPIClient()
        session = mock_session('{"query": {}}')
        api._ensure_session = AsyncMock(return_value=session)

        result = await api.get(SITE, {'action': 'query', 'meta': 'userinfo', 'uiprop': None})

        assert result == {'query': {}}
        method, url = session.request.call_args.args
        params = session.request.call_args.kwargs['params']
        assert method == 'GET'
        assert url == "https://en.wikipedia.org/w/api.php"
        assert params == {
            'action': 'query',
            'meta': 'userinfo',
            'format': 'json',
            'formatversion': '2',
        }

    @pytest.mark.asyncio
    async def test_post_sends_form_data(self):
        """Test POST fields go in the body."""
        api = AsyncAPIClient()
        session = mock_session('{"clientlogin": {"status": "PASS"}}')
        api._ensure_session = AsyncMock(return_value=session)

        await api.post(SITE, {'action': 'clientlogin'})

        assert session.request.call_args.args[0] == 'POST'
        assert session.request.call_args.kwargs['data']['action'] == 'clientlogin'
        assert 'params' not in session.request.call_args.kwargs

    @pytest.mark.asyncio
    async def test_error_payload_raises(self):
        """Test an error payload becomes MediaWikiAPIError."""
        api = AsyncAPIClient()
        api._ensure_session = AsyncMock(return_value=mock_session(
            '{"error": {"code": "badtoken", "info": "Invalid CSRF token."}}'
        ))

        with pytest.raises(MediaWikiAPIError) as exc_info:
            await api.post(SITE, {'action': 'logout'})

        assert exc_info.value.code == 'badtoken'
        assert exc_info.value.info == 'Invalid CSRF token.'

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        """Test HTTP errors become MediaWikiAPIError."""
        api = AsyncAPIClient()
        api._ensure_session = AsyncMock(return_value=mock_session('oops', status=503))

        with pytest.raises(MediaWikiAPIError) as exc_info:
            await api.get(SITE, {'action': 'query'})

        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        """Test a non-JSON body becomes MediaWikiAPIError."""
        api = AsyncAPIClient()
        api._ensure_session = AsyncMock(return_value=mock_session('<html>'))

        with pytest.raises(MediaWikiAPIError, match='invalidjson'):
            await api.get(SITE, {'action': 'query'})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        aiohttp.ServerDisconnectedError(),
        asyncio.TimeoutError(),
    ])
    async def test_network_errors_raise_connectivity_error(self, error):
        """Test unreachable sites are reported as connectivity errors."""
        api = AsyncAPIClient()
        api._ensure_session = AsyncMock(return_value=mock_session(error=error))

        with pytest.raises(ConnectivityError):
            await api.get(SITE, {'action': 'query'})

    @pytest.mark.asyncio
    async def test_truncated_body_raises_connectivity_error(self):
        """Test a body cut off mid-response is a connectivity error."""
        api = AsyncAPIClient()
        api._ensure_session = AsyncMock(return_value=mock_session(
            read_error=aiohttp.ClientPayloadError("Response payload is not completed")
        ))

        with pytest.raises(ConnectivityError):
            await api.get(SITE, {'action': 'query'})

    @pytest.mark.asyncio
    async def test_shared_cookie_jar(self):
        """Test an injected cookie jar is used by the client."""
        jar = aiohttp.CookieJar()
        api = AsyncAPIClient(cookie_jar=jar)

        assert api.cookie_jar is jar


class TestTokenFetcher:
    """Test suite for TokenFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_login_token(self, client):
        """Test fetching a login token."""
        client.get.return_value = {'query': {'tokens': {'logintoken': 'abc+\\'}}}

        token = await TokenFetcher(client).fetch_token(TokenType.LOGIN, SITE)

        assert token == LoginToken('abc+\\', TokenType.LOGIN)
        client.get.assert_awaited_once_with(SITE, {
            'action': 'query',
            'meta': 'tokens',
            'type': 'login',
        })

    @pytest.mark.asyncio
    async def test_fetch_token_by_name(self, client):
        """Test token types can be given as strings."""
        client.get.return_value = {'query': {'tokens': {'csrftoken': 'xyz+\\'}}}

        token = await TokenFetcher(client).fetch_token('csrf', SITE)

        assert token.type is TokenType.CSRF
        assert token.value == 'xyz+\\'

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        """Test a response without a token is an error."""
        client.get.return_value = {'query': {'tokens': {}}}

        with pytest.raises(TokenFetchError):
            await TokenFetcher(client).fetch_token(TokenType.LOGIN, SITE)

    @pytest.mark.asyncio
    async def test_api_error(self, client):
        """Test API errors become TokenFetchError."""
        client.get.side_effect = MediaWikiAPIError('readapidenied', 'No read permission')

        with pytest.raises(TokenFetchError) as exc_info:
            await TokenFetcher(client).fetch_token(TokenType.LOGIN, SITE)

        assert exc_info.value.code == 'readapidenied'

    @pytest.mark.asyncio
    async def test_connectivity_error_passes_through(self, client):
        """Test connectivity errors are not wrapped."""
        client.get.side_effect = ConnectivityError("offline")

        with pytest.raises(ConnectivityError):
            await TokenFetcher(client).fetch_token(TokenType.LOGIN, SITE)

    def test_token_repr_hides_value(self):
        """Test the token value is not printed."""
        assert 'abc' not in repr(LoginToken('abc'))


class TestCurrentUserFetcher:
    """Test suite for CurrentUserFetcher."""

    @pytest.mark.asyncio
    async def test_logged_in_user(self, client):
        """Test a named user is returned."""
        client.get.return_value = {'query': {'userinfo': {
            'id': 7, 'name': 'Alice', 'groups': ['*', 'user'],
        }}}

        identity = await CurrentUserFetcher(client).fetch(SITE)

        assert identity == UserIdentity(name='Alice', user_id=7, groups=('*', 'user'))

    @pytest.mark.asyncio
    async def test_anonymous_user(self, client):
        """Test an anonymous session yields None."""
        client.get.return_value = {'query': {'userinfo': {
            'id': 0, 'name': '203.0.113.7', 'anon': True,
        }}}

        assert await CurrentUserFetcher(client).fetch(SITE) is None

    @pytest.mark.asyncio
    async def test_missing_userinfo(self, client):
        """Test a malformed response is an error."""
        client.get.return_value = {'query': {}}

        with pytest.raises(CurrentUserFetchError):
            await CurrentUserFetcher(client).fetch(SITE)

    @pytest.mark.asyncio
    async def test_api_error(self, client):
        """Test API errors become CurrentUserFetchError."""
        client.get.side_effect = MediaWikiAPIError('internal_api_error')

        with pytest.raises(CurrentUserFetchError):
            await CurrentUserFetcher(client).fetch(SITE)


class TestAccountLogin:
    """Test suite for AccountLogin."""

    @pytest.fixture
    def token(self):
        return LoginToken('abc+\\')

    @pytest.mark.asyncio
    async def test_pass_returns_normalized_username(self, client, token):
        """Test PASS returns the server's username."""
        client.post.return_value = {'clientlogin': {'status': 'PASS', 'username': 'Alice'}}

        result = await AccountLogin(client).login('alice', 'secret', token, SITE)

        assert result.username == 'Alice'
        fields = client.post.await_args.args[1]
        assert fields['action'] == 'clientlogin'
        assert fields['logintoken'] == 'abc+\\'
        assert fields['loginreturnurl'] == SITE

    @pytest.mark.asyncio
    async def test_optional_fields(self, client, token):
        """Test optional fields are mapped to API parameter names."""
        client.post.return_value = {'clientlogin': {'status': 'PASS', 'username': 'Alice'}}

        await AccountLogin(client).login(
            'alice', 'secret', token, SITE,
            retype_password='new', second_factor_token='123456',
            captcha_id='9', captcha_answer='word'
        )

        fields = client.post.await_args.args[1]
        assert fields['retype'] == 'new'
        assert fields['OATHToken'] == '123456'
        assert fields['captchaId'] == '9'
        assert fields['captchaWord'] == 'word'

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, token):
        """Test FAIL/wrongpassword is invalid credentials."""
        client.post.return_value = {'clientlogin': {
            'status': 'FAIL',
            'message': 'Incorrect username or password entered.',
            'messagecode': 'wrongpassword',
        }}

        with pytest.raises(AccountLoginError) as exc_info:
            await AccountLogin(client).login('alice', 'wrong', token, SITE)

        assert exc_info.value.reason is LoginFailureReason.INVALID_CREDENTIALS
        assert str(exc_info.value) == 'Incorrect username or password entered.'
        assert exc_info.value.code == 'wrongpassword'

    @pytest.mark.asyncio
    async def test_second_factor_required(self, client, token):
        """Test a TOTP UI request asks for a second factor."""
        client.post.return_value = {'clientlogin': {
            'status': 'UI',
            'message': 'Enter a verification code from your authenticator app.',
            'requests': [{
                'id': 'MediaWiki\\Extension\\OATHAuth\\Auth\\TOTPAuthenticationRequest',
                'fields': {'OATHToken': {'type': 'string'}},
            }],
        }}

        with pytest.raises(AccountLoginError) as exc_info:
            await AccountLogin(client).login('alice', 'secret', token, SITE)

        assert exc_info.value.needs_second_factor is True

    @pytest.mark.asyncio
    async def test_captcha_required(self, client, token):
        """Test a captcha request carries the captcha to solve."""
        client.post.return_value = {'clientlogin': {
            'status': 'FAIL',
            'message': 'Incorrect or missing CAPTCHA.',
            'messagecode': 'captcha-error',
            'requests': [{
                'id': 'CaptchaAuthenticationRequest',
                'fields': {
                    'captchaId': {'type': 'hidden', 'value': '1234'},
                    'captchaInfo': {
                        'type': 'null',
                        'value': '/w/index.php?title=Special:Captcha/image&wpCaptchaId=1234',
                    },
                    'captchaWord': {'type': 'string'},
                },
            }],
        }}

        with pytest.raises(AccountLoginError) as exc_info:
            await AccountLogin(client).login('alice', 'secret', token, SITE)

        error = exc_info.value
        assert error.needs_captcha is True
        assert error.captcha.captcha_id == '1234'
        assert error.captcha.url == (
            'https://en.wikipedia.org/w/index.php?title=Special:Captcha/image&wpCaptchaId=1234'
        )

    @pytest.mark.asyncio
    async def test_password_change_required(self, client, token):
        """Test a retype field means the password must be changed."""
        client.post.return_value = {'clientlogin': {
            'status': 'UI',
            'message': 'Please set a new password.',
            'requests': [{
                'id': 'MediaWiki\\Auth\\PasswordAuthenticationRequest',
                'fields': {'password': {'type': 'password'}, 'retype': {'type': 'password'}},
            }],
        }}

        with pytest.raises(AccountLoginError) as exc_info:
            await AccountLogin(client).login('alice', 'temp', token, SITE)

        assert exc_info.value.reason is LoginFailureReason.PASSWORD_CHANGE_REQUIRED

    @pytest.mark.asyncio
    async def test_api_error(self, client, token):
        """Test API errors become AccountLoginError."""
        client.post.side_effect = MediaWikiAPIError('badtoken', 'Invalid token')

        with pytest.raises(AccountLoginError) as exc_info:
            await AccountLogin(client).login('alice', 'secret', token, SITE)

        assert exc_info.value.reason is LoginFailureReason.UNKNOWN
        assert exc_info.value.code == 'badtoken'


class TestLoginMessageCodes:
    """Test suite for LoginMessageCodes."""

    @pytest.mark.parametrize("code,reason", [
        ('wrongpassword', LoginFailureReason.INVALID_CREDENTIALS),
        ('oathauth-auth-ui', LoginFailureReason.SECOND_FACTOR_REQUIRED),
        ('oathauth-login-failed', LoginFailureReason.WRONG_SECOND_FACTOR),
        ('resetpass-temp-emailed', LoginFailureReason.PASSWORD_CHANGE_REQUIRED),
        ('login-throttled', LoginFailureReason.THROTTLED),
        ('fancycaptcha-badcaptcha', LoginFailureReason.CAPTCHA_REQUIRED),
        ('something-new', LoginFailureReason.UNKNOWN),
        (None, LoginFailureReason.UNKNOWN),
    ])
    def test_get_reason(self, code, reason):
        """Test message code classification."""
        assert LoginMessageCodes.get_reason(code) is reason

    def test_get_request_reason_strips_namespace(self):
        """Test namespaced request ids are recognized."""
        reason = LoginMessageCodes.get_request_reason(
            'MediaWiki\\Extension\\ConfirmEdit\\CaptchaAuthenticationRequest'
        )

        assert reason is LoginFailureReason.CAPTCHA_REQUIRED


class TestServerLogout:
    """Test suite for ServerLogout."""

    @pytest.mark.asyncio
    async def test_logout(self, client):
        """Test logout posts the CSRF token."""
        client.post.return_value = {}

        await ServerLogout(client).logout(LoginToken('csrf+\\', TokenType.CSRF), SITE)

        client.post.assert_awaited_once_with(SITE, {'action': 'logout', 'token': 'csrf+\\'})

    @pytest.mark.asyncio
    async def test_logout_rejected(self, client):
        """Test API errors become ServerLogoutError."""
        client.post.side_effect = MediaWikiAPIError('badtoken')

        with pytest.raises(ServerLogoutError):
            await ServerLogout(client).logout(LoginToken('x', TokenType.CSRF), SITE)
