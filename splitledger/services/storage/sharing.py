"""
Share Links

Embeds a ledger token in a URL query parameter so the whole ledger
travels with the link. Opening the link restores the ledger.
"""

from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from splitledger.services.storage.interface import ShareLinkInterface


class UrlShareLink(ShareLinkInterface):
    """
    Share links of the form <base_url>?<query_param>=<token>.

    Other query parameters on the base URL are kept; an existing
    token parameter is replaced.
    """

    def __init__(self, base_url: str, query_param: str = "data"):
        self._base_url = base_url
        self._query_param = query_param

    def embed(self, token: str) -> str:
        parts = urlsplit(self._base_url)
        query = [
            (key, value)
            for key, values in parse_qs(parts.query, keep_blank_values=True).items()
            for value in values
            if key != self._query_param
        ]
        if token:
            query.append((self._query_param, token))
        return urlunsplit(parts._replace(query=urlencode(query)))

    def extract(self, reference: str) -> Optional[str]:
        if not reference:
            return None
        values = parse_qs(urlsplit(reference).query).get(self._query_param)
        if not values:
            return None
        return values[0] or None
