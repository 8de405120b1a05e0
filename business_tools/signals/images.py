"""
Image audit over the main-content region.

File sizes are never downloaded: ``estimated_kb`` is a rough figure derived from
the declared dimensions and the file format.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from ..dom import attr, declared_size
from ..models import ImageDetail, ImageReport

OVERSIZED_PX = 2000
GENERIC_FILENAME_RE = re.compile(r"^(image|img|photo|pic|untitled)", re.I)
MODERN_FORMATS = (".webp", ".avif")

BYTES_PER_PIXEL_MODERN = 0.75
BYTES_PER_PIXEL_PNG = 3
BYTES_PER_PIXEL_OTHER = 1.5


def image_filename(src: str) -> str:
    return src.split("/")[-1].split("?")[0]


def is_descriptive_filename(src: str) -> bool:
    filename = image_filename(src)
    return bool(filename) and bool(re.search(r"[a-z0-9-]+", filename, re.I)) and not GENERIC_FILENAME_RE.match(filename)


def estimate_kb(width: int, height: int, src: str, modern: bool) -> float:
    pixels = width * height
    if modern:
        factor = BYTES_PER_PIXEL_MODERN
    elif ".png" in src.lower():
        factor = BYTES_PER_PIXEL_PNG
    else:
        factor = BYTES_PER_PIXEL_OTHER
    return pixels * factor / 1024


def is_size_optimized(width: int, height: int, estimated: float, modern: bool, oversized: bool) -> bool:
    if oversized:
        return False
    if modern and estimated < 500:
        return True
    longest = max(width, height)
    if longest < 800:
        return estimated < 200
    if longest < 1500:
        return estimated < 500
    return estimated < 1000


def inspect_image(img: Tag) -> ImageDetail:
    src = (attr(img, "data-original-src") or attr(img, "src")).strip()
    alt = attr(img, "alt").strip()
    srcset = attr(img, "srcset")
    sizes = attr(img, "sizes")
    width = int(declared_size(img, "width"))
    height = int(declared_size(img, "height"))
    src_lower = src.lower()
    modern = any(ext in src_lower for ext in MODERN_FORMATS) or any(ext in srcset.lower() for ext in MODERN_FORMATS)
    oversized = width > OVERSIZED_PX or height > OVERSIZED_PX
    descriptive = is_descriptive_filename(src)
    estimated = estimate_kb(width, height, src, modern)
    return ImageDetail(
        src=src,
        alt=alt,
        title=attr(img, "title").strip(),
        width=width,
        height=height,
        has_alt=bool(alt),
        is_responsive=bool(srcset or sizes),
        has_lazy_loading=attr(img, "loading").lower() == "lazy" or bool(img.get("data-src")),
        is_modern_format=modern,
        is_descriptive=descriptive,
        is_optimized=descriptive and bool(alt),
        is_oversized=oversized,
        estimated_kb=round(estimated, 1),
        size_optimized=is_size_optimized(width, height, estimated, modern, oversized),
    )


def collect_images(main: Tag | BeautifulSoup) -> ImageReport:
    details = [inspect_image(img) for img in main.find_all("img")]
    return ImageReport(
        total=len(details),
        with_alt=sum(1 for d in details if d.has_alt),
        without_alt=sum(1 for d in details if not d.has_alt),
        with_title=sum(1 for d in details if d.title),
        optimized=sum(1 for d in details if d.is_optimized),
        responsive=sum(1 for d in details if d.is_responsive),
        lazy_loading=sum(1 for d in details if d.has_lazy_loading),
        modern_format=sum(1 for d in details if d.is_modern_format),
        oversized=sum(1 for d in details if d.is_oversized),
        size_optimized=sum(1 for d in details if d.size_optimized),
        details=details,
    )
