"""
Async MediaWiki API client.

Thin aiohttp wrapper around ``api.php``. Every request is routed to the
site it is made for; the cookie jar is shared with the cookie store so
session cookies set by the login endpoint are visible to the coordinator.
"""
import json
import asyncio
import logging
from typing import Dict, Optional, Any
import aiohttp
from aiohttp.abc import AbstractCookieJar

from .config import APIConfig
from .errors import MediaWikiAPIError
from ..exceptions import ConnectivityError
from ..logging import get_logger


class AsyncAPIClient:
    """
    Asynchronous MediaWiki API client.
    
    Features:
    - Full async/await support
    - Configurable proxy, SSL, timeouts
    - Connection pooling
    - Shared cookie jar
    
    Example:
        >>> async with AsyncAPIClient(APIConfig.default()) as client:
        ...     data = await client.get('https://en.wikipedia.org',
        ...                             {'action': 'query', 'meta': 'userinfo'})
    """
    
    def __init__(
        self,
        config: Optional[APIConfig] = None,
        cookie_jar: Optional[AbstractCookieJar] = None
    ):
        """
        Initialize async API client.
        
        Args:
            config: API configuration (uses defaults if not provided)
            cookie_jar: Cookie jar to share (created lazily if not provided)
        """
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._cookie_jar = cookie_jar
        self._closed = False
        
        self._logger = get_logger('wikisession.api')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)
    
    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config
    
    @property
    def cookie_jar(self) -> AbstractCookieJar:
        """Cookie jar used by the HTTP session (must be accessed inside a running loop)."""
        if self._cookie_jar is None:
            self._cookie_jar = aiohttp.CookieJar()
        return self._cookie_jar
    
    async def __aenter__(self) -> 'AsyncAPIClient':
        """Async context manager entry."""
        await self._ensure_session()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
    
    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                cookie_jar=self.cookie_jar,
                **self._config.get_session_kwargs()
            )
            self._closed = False
        return self._session
    
    async def close(self):
        """Close client and release resources."""
        self._closed = True
        
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
        
        if self._connector and not self._connector.closed:
            await self._connector.close()
            self._connector = None
    
    def api_url(self, site: str) -> str:
        """Build the api.php URL for a site."""
        return f"{site.rstrip('/')}{self._config.api_path}"
    
    async def get(self, site: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Make a GET request.
        
        Args:
            site: Site URL (e.g. 'https://en.wikipedia.org')
            params: Query parameters (format parameters are added)
            
        Returns:
            Decoded JSON response
            
        Raises:
            ConnectivityError: If the site cannot be reached
            MediaWikiAPIError: If the API reports an error
        """
        return await self._request('GET', site, params)
    
    async def post(self, site: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Make a form-encoded POST request.
        
        Args:
            site: Site URL
            data: Form fields (format parameters are added)
            
        Returns:
            Decoded JSON response
            
        Raises:
            ConnectivityError: If the site cannot be reached
            MediaWikiAPIError: If the API reports an error
        """
        return await self._request('POST', site, data)
    
    async def _request(
        self,
        method: str,
        site: str,
        fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        session = await self._ensure_session()
        url = self.api_url(site)
        payload = {
            **{k: v for k, v in fields.items() if v is not None},
            'format': 'json',
            'formatversion': '2',
        }
        
        # Field values may contain secrets; log the action only
        self._logger.debug(f"{method} {url} action={payload.get('action')}")
        
        request_kwargs: Dict[str, Any] = {
            'proxy': self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
        }
        if method == 'GET':
            request_kwargs['params'] = payload
        else:
            request_kwargs['data'] = payload
        
        try:
            async with session.request(method, url, **request_kwargs) as response:
                response_text = await response.text()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.warning(f"Network error talking to {site}: {e!r}")
            raise ConnectivityError(f"Cannot reach {site}: {e}") from e
        
        if status >= 400:
            raise MediaWikiAPIError('http', f"HTTP {status}", status=status)
        
        result = self._parse_response(response_text)
        
        if 'error' in result:
            error = result['error'] or {}
            raise MediaWikiAPIError(
                error.get('code', 'unknown'),
                error.get('info', ''),
                status=status
            )
        
        return result
    
    def _parse_response(self, response_text: str) -> Dict[str, Any]:
        """Parse API response."""
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError:
            raise MediaWikiAPIError('invalidjson', response_text[:200])
        
        if not isinstance(data, dict):
            raise MediaWikiAPIError('invalidjson', f"Unexpected payload: {type(data).__name__}")
        
        return data
