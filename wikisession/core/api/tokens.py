"""Token fetching via ``meta=tokens``."""
from typing import Union

from .async_client import AsyncAPIClient
from .errors import MediaWikiAPIError
from .models import LoginToken, TokenType
from ..exceptions import TokenFetchError


class TokenFetcher:
    """Fetches login and CSRF tokens from a site."""
    
    def __init__(self, client: AsyncAPIClient):
        self._client = client
    
    async def fetch_token(
        self,
        token_type: Union[TokenType, str],
        site: str
    ) -> LoginToken:
        """
        Fetch a token of the given type.
        
        Args:
            token_type: Token type (login, csrf)
            site: Site URL
            
        Returns:
            LoginToken
            
        Raises:
            TokenFetchError: If the site rejects the request or returns no token
            ConnectivityError: If the site is unreachable
        """
        token_type = TokenType(token_type)
        
        try:
            data = await self._client.get(site, {
                'action': 'query',
                'meta': 'tokens',
                'type': token_type.value,
            })
        except MediaWikiAPIError as e:
            raise TokenFetchError(f"Token request rejected by {site}: {e}", e.code) from e
        
        tokens = (data.get('query') or {}).get('tokens') or {}
        value = tokens.get(f"{token_type.value}token")
        if not value:
            raise TokenFetchError(f"No {token_type.value} token returned by {site}", 'notoken')
        
        return LoginToken(value=value, type=token_type)
