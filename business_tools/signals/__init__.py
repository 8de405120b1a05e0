"""Independent signal collectors; each reads the parsed page and returns one report."""

from .images import collect_images
from .keywords import KeywordContext, collect_keywords
from .links import collect_links
from .metadata import collect_headings, collect_metadata
from .mobile import collect_mobile_usability
from .readability import collect_readability
from .schema import collect_structured_data
from .trust import collect_trust

__all__ = [
    "KeywordContext",
    "collect_headings",
    "collect_images",
    "collect_keywords",
    "collect_links",
    "collect_metadata",
    "collect_mobile_usability",
    "collect_readability",
    "collect_structured_data",
    "collect_trust",
]
