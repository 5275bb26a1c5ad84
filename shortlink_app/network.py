"""
Address helpers shared by click tracking and outbound link lookups.
"""

import ipaddress
from typing import Optional

import httpx

LOCAL_HOSTNAMES = ("localhost",)
LOCAL_SUFFIXES = (".localhost", ".local", ".internal")


def is_public(ip) -> bool:
    return not (
        ip.is_private or ip.is_reserved or ip.is_loopback or ip.is_link_local
        or ip.is_multicast or ip.is_unspecified
    )


def _strip_forwarded_params(value: str) -> str:
    # RFC 7239: for=1.2.3.4;proto=https, parameters in any order
    if "=" not in value:
        return value
    for part in value.split(";"):
        key, _, param = part.partition("=")
        if key.strip().lower() == "for":
            return param
    return ""


def _strip_port(value: str) -> str:
    if value.startswith("["):
        # [2001:db8::1]:4711
        return value[1:].split("]", 1)[0]
    if value.count(":") == 1:
        # 8.8.8.8:443; bare IPv6 has more than one colon
        return value.split(":", 1)[0]
    return value


def parse_public_ip(value: str) -> Optional[str]:
    """
    First address of a proxy header value, if it is publicly routable.

    Accepts plain lists (X-Forwarded-For), RFC 7239 Forwarded elements,
    quoted values, bracketed IPv6 and trailing ports.
    """
    candidate = value.split(",")[0].strip()
    candidate = _strip_forwarded_params(candidate).strip().strip('"')
    candidate = _strip_port(candidate)
    try:
        ip = ipaddress.ip_address(candidate)
    except ValueError:
        return None
    if not is_public(ip):
        return None
    return str(ip)


def is_public_target(url: str) -> bool:
    """
    False for URLs aimed at loopback, private or otherwise internal hosts.

    Only literal addresses and well-known local names are recognised;
    hostnames are not resolved.
    """
    try:
        host = httpx.URL(url).host.lower()
    except (httpx.InvalidURL, ValueError):
        return False
    if not host:
        return False
    if host in LOCAL_HOSTNAMES or host.endswith(LOCAL_SUFFIXES):
        return False
    try:
        ip = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return True
    return is_public(ip)
