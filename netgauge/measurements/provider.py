"""Upstream provider detection from public IP-geolocation services."""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests

from .models import ProviderInfo

LOGGER = logging.getLogger(__name__)

PROVIDER_SERVICES = (
    "https://ipapi.co/json/",
    "https://ip-api.com/json/",
)

# Checked in order; the first substring hit wins.
CARRIER_PATTERNS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("mtn",), "MTN"),
    (("airtel",), "Airtel"),
    (("glo", "globacom"), "Glo"),
    (("9mobile", "etisalat"), "9mobile"),
    (("vodafone",), "Vodafone"),
    (("orange",), "Orange"),
    (("verizon",), "Verizon"),
    (("at&t", "att"), "AT&T"),
    (("t-mobile",), "T-Mobile"),
    (("telkom",), "Telkom"),
)

AS_PREFIX = re.compile(r"^AS\d+\s+", re.IGNORECASE)


def normalize_provider_name(raw: Optional[str]) -> Optional[str]:
    """Map a raw organisation string to a carrier display name."""

    if not raw:
        return None
    lowered = raw.lower()
    for needles, name in CARRIER_PATTERNS:
        if any(needle in lowered for needle in needles):
            return name
    return AS_PREFIX.sub("", raw).strip()


def _field(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return str(value) if value not in (None, "") else None


def _from_ipapi_co(data: Dict[str, Any]) -> ProviderInfo:
    return ProviderInfo(
        name=normalize_provider_name(_field(data, "org") or _field(data, "asn")),
        country=_field(data, "country_name"),
        isp=_field(data, "org"),
        asn=_field(data, "asn"),
    )


def _from_ip_api_com(data: Dict[str, Any]) -> ProviderInfo:
    return ProviderInfo(
        name=normalize_provider_name(_field(data, "isp") or _field(data, "org")),
        country=_field(data, "country"),
        isp=_field(data, "isp"),
        asn=_field(data, "as"),
    )


PayloadParser = Callable[[Dict[str, Any]], ProviderInfo]

SERVICE_PARSERS: Tuple[Tuple[str, PayloadParser], ...] = (
    ("ipapi.co", _from_ipapi_co),
    ("ip-api.com", _from_ip_api_com),
)


def parser_for(url: str) -> Optional[PayloadParser]:
    host = (urlparse(url).hostname or "").lower()
    for suffix, parser in SERVICE_PARSERS:
        if host == suffix or host.endswith("." + suffix):
            return parser
    return None


def resolve_provider(
    session: requests.Session,
    services: Sequence[str] = PROVIDER_SERVICES,
    timeout: float = 10.0,
) -> ProviderInfo:
    """Return provider details from the first service that answers."""

    for url in services:
        parser = parser_for(url)
        if parser is None:
            LOGGER.warning("No response parser registered for %s, skipping", url)
            continue
        try:
            response = session.get(url, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("Provider lookup via %s failed: %s", url, exc)
            continue
        if not isinstance(data, dict):
            LOGGER.warning("Provider lookup via %s returned unexpected payload", url)
            continue
        info = parser(data)
        LOGGER.info("Detected provider %s (%s) via %s", info.name, info.country, url)
        return info

    LOGGER.warning("All provider lookups failed")
    return ProviderInfo()
