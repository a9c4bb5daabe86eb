"""Server-side logout via ``action=logout``."""
from .async_client import AsyncAPIClient
from .errors import MediaWikiAPIError
from .models import LoginToken
from ..exceptions import ServerLogoutError


class ServerLogout:
    """Deletes the server session, its login tokens and browser cookies."""
    
    def __init__(self, client: AsyncAPIClient):
        self._client = client
    
    async def logout(self, token: LoginToken, site: str) -> None:
        """
        Log out on the server.
        
        Args:
            token: CSRF token from the same site
            site: Site URL
            
        Raises:
            ServerLogoutError: If the server rejects the request
            ConnectivityError: If the site is unreachable
        """
        try:
            await self._client.post(site, {'action': 'logout', 'token': token.value})
        except MediaWikiAPIError as e:
            raise ServerLogoutError(f"Logout rejected by {site}: {e}", e.code) from e
