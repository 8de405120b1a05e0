"""
Small HTML and URL helpers shared by the extractor, the collectors and the fetcher.
"""

from __future__ import annotations

import ipaddress
import re
import socket
import unicodedata
from urllib.parse import urlparse, urlunparse

from bs4 import BeautifulSoup, Tag

PX_RE = re.compile(r"([\d.]+)\s*px", re.I)


def clamp(val: float, low: float, high: float) -> float:
    return max(low, min(high, val))


def normalize_url(raw: str) -> str:
    value = raw.strip()
    parsed = urlparse(value)
    if not parsed.scheme:
        value = f"https://{value}"
        parsed = urlparse(value)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme}")
    if not parsed.hostname:
        raise ValueError(f"URL has no host: {raw}")
    netloc = parsed.netloc or (parsed.hostname or "")
    path = parsed.path or "/"
    return urlunparse((parsed.scheme, netloc, path, "", parsed.query, ""))


def canonical_host(host: str | None) -> str:
    normalized = (host or "").strip().lower().rstrip(".")
    if normalized.startswith("www."):
        return normalized[4:]
    return normalized


def is_public_target(url: str) -> bool:
    host = urlparse(url).hostname
    if not host:
        return False
    try:
        info = socket.getaddrinfo(host, None)
    except socket.gaierror:
        return False
    for _, _, _, _, sockaddr in info:
        ip_text = sockaddr[0]
        try:
            ip = ipaddress.ip_address(ip_text)
        except ValueError:
            continue
        if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local or ip.is_multicast:
            continue
        return True
    return False


def soup_of(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "lxml")
    except Exception:
        return BeautifulSoup(html, "html.parser")


def meta(soup: BeautifulSoup, name: str | None = None, prop: str | None = None) -> str | None:
    tag = None
    if name:
        tag = soup.find("meta", attrs={"name": re.compile(rf"^{re.escape(name)}$", re.I)})
    elif prop:
        tag = soup.find("meta", attrs={"property": re.compile(rf"^{re.escape(prop)}$", re.I)})
    if tag and tag.get("content"):
        return str(tag.get("content")).strip()
    return None


def attr(tag: Tag, name: str) -> str:
    """Attribute as a plain string; multi-valued attributes (class, rel) are space-joined."""
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return str(value)


def rel_tokens(tag: Tag) -> list[str]:
    return [token.lower() for token in attr(tag, "rel").split()]


def text_of(node: Tag | BeautifulSoup | None) -> str:
    if node is None:
        return ""
    text = node.get_text(" ", strip=True)
    return nfc(re.sub(r"\s+", " ", text).strip())


def nfc(text: str) -> str:
    return unicodedata.normalize("NFC", text or "")


def inline_px(style: str, prop: str) -> float:
    """Pixel value of one declaration in an inline style, 0 when absent or not in px."""
    match = re.search(rf"(?:^|;)\s*{re.escape(prop)}\s*:\s*([^;]+)", style or "", re.I)
    if not match:
        return 0.0
    px = PX_RE.search(match.group(1))
    if not px:
        return 0.0
    try:
        return float(px.group(1))
    except ValueError:
        return 0.0


def parse_dimension(value: str | None) -> int:
    if not value:
        return 0
    match = re.match(r"\s*(\d+)", str(value))
    return int(match.group(1)) if match else 0


def declared_size(tag: Tag, prop: str) -> float:
    """Size from the inline style first, then from the width/height attribute."""
    from_style = inline_px(attr(tag, "style"), prop)
    if from_style > 0:
        return from_style
    return float(parse_dimension(attr(tag, prop)))
