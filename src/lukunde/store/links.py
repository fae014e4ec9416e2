"""Shareable links pointing at a sheet id."""

from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..config import settings


def build_share_link(
    sheet_id: str, base_url: Optional[str] = None, param: Optional[str] = None
) -> str:
    """Return ``base_url`` with the sheet id set as a query parameter."""
    parts = urlsplit(base_url or settings.share_link_base_url)
    query = dict(parse_qsl(parts.query))
    query[param or settings.share_link_param] = sheet_id
    return urlunsplit(parts._replace(query=urlencode(query)))


def sheet_id_from_link(link: str, param: Optional[str] = None) -> Optional[str]:
    """Extract the sheet id from a share link, or None if absent."""
    query = dict(parse_qsl(urlsplit(link).query))
    return query.get(param or settings.share_link_param) or None
