"""
Submission encoder: turns a validated field set into the outbound
redirect URL and hands it to a navigation sink.
"""

from typing import Mapping, Protocol
from urllib.parse import quote

from quoteform.config import settings
from quoteform.schemas.form import FIELD_KEYS, FormFields

# Characters left unescaped by a browser's encodeURIComponent
URI_COMPONENT_SAFE = "-_.!~*'()"


class NavigationSink(Protocol):
    async def navigate(self, url: str) -> None:
        """Send the user to *url*."""
        ...


def encode(fields: FormFields | Mapping) -> str:
    """
    Build the query string for *fields*.

    Non-empty values are emitted as ``key=value`` in field vocabulary
    order; empty values are left out entirely.
    """
    if isinstance(fields, FormFields):
        pairs = fields.items()
    else:
        pairs = [(key, fields.get(key)) for key in FIELD_KEYS]

    return "&".join(
        f"{key}={quote(str(value), safe=URI_COMPONENT_SAFE)}"
        for key, value in pairs
        if value
    )


def build_redirect_url(fields: FormFields | Mapping, base_url: str | None = None) -> str:
    """Join the redirect base URL and the encoded field set."""
    base = base_url if base_url is not None else settings.REDIRECT_BASE_URL
    return f"{base}?{encode(fields)}"
