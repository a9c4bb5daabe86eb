"""Current-user lookup via ``meta=userinfo``."""
from typing import Optional

from .async_client import AsyncAPIClient
from .errors import MediaWikiAPIError
from .models import UserIdentity
from ..exceptions import CurrentUserFetchError


class CurrentUserFetcher:
    """
    Asks a site who the current session belongs to.
    
    An anonymous session is a normal outcome and yields ``None``.
    """
    
    def __init__(self, client: AsyncAPIClient):
        self._client = client
    
    async def fetch(self, site: str) -> Optional[UserIdentity]:
        """
        Fetch the logged-in user for a site.
        
        Args:
            site: Site URL
            
        Returns:
            UserIdentity, or None when the session is anonymous
            
        Raises:
            CurrentUserFetchError: If the query fails
            ConnectivityError: If the site is unreachable
        """
        try:
            data = await self._client.get(site, {
                'action': 'query',
                'meta': 'userinfo',
                'uiprop': 'groups',
            })
        except MediaWikiAPIError as e:
            raise CurrentUserFetchError(f"User info request failed: {e}", e.code) from e
        
        userinfo = (data.get('query') or {}).get('userinfo')
        if not userinfo:
            raise CurrentUserFetchError("Response has no userinfo", 'nouserinfo')
        
        if 'anon' in userinfo or not userinfo.get('id'):
            return None
        
        return UserIdentity(
            name=userinfo['name'],
            user_id=int(userinfo['id']),
            groups=tuple(userinfo.get('groups', ())),
        )
