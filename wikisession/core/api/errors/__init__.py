"""MediaWiki API errors and login message codes."""
from .api_errors import MediaWikiAPIError, LoginMessageCodes

__all__ = [
    'MediaWikiAPIError',
    'LoginMessageCodes',
]
