"""Destination checks for the upload relay."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from collections.abc import Iterable

_ALLOWED_SCHEMES = ("http", "https")


class DestinationRejected(ValueError):
    """The requested upload destination may not be relayed to."""


def check_destination(upload_url: str | None, allowed_hosts: Iterable[str]) -> str:
    """Return the stripped destination URL, or raise ``DestinationRejected``.

    Only http(s) URLs whose host is on the allow-list are accepted; this keeps
    the relay from acting as an open proxy.
    """
    if upload_url is None or not upload_url.strip():
        raise DestinationRejected("Missing destination URL")

    url = upload_url.strip()
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as exc:
        raise DestinationRejected("Invalid destination URL") from exc
    if parts.scheme not in _ALLOWED_SCHEMES or not hostname:
        raise DestinationRejected("Invalid destination URL")

    if hostname not in {host.lower() for host in allowed_hosts}:
        raise DestinationRejected("Upload destination not allowed")
    return url
