import json
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


FILLER_SENTENCE = "The quick brown fox jumps over the lazy dog."


def filler(words: int) -> str:
    """Roughly ``words`` words of plain sentences."""
    count = max(1, words // 9)
    return " ".join([FILLER_SENTENCE] * count)


def build_html(
    title="Máy tính khoa học trực tuyến miễn phí",
    description=None,
    h1="Máy tính khoa học trực tuyến",
    body="",
    head_extra="",
    lang="vi",
    canonical="https://example.com/page",
    viewport="width=device-width, initial-scale=1",
    schema=None,
):
    head = ['<meta charset="utf-8">']
    if title is not None:
        head.append(f"<title>{title}</title>")
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    if viewport:
        head.append(f'<meta name="viewport" content="{viewport}">')
    if canonical:
        head.append(f'<link rel="canonical" href="{canonical}">')
    if schema is not None:
        head.append(f'<script type="application/ld+json">{json.dumps(schema)}</script>')
    head.append(head_extra)
    lang_attr = f' lang="{lang}"' if lang else ""
    heading = f"<h1>{h1}</h1>" if h1 else ""
    return (
        f"<!DOCTYPE html><html{lang_attr}><head>{''.join(head)}</head>"
        f"<body><header><nav><a href=\"/\">Home</a></nav></header>"
        f"<article>{heading}{body}</article>"
        f"<footer>Footer text</footer></body></html>"
    )


@pytest.fixture
def make_html():
    return build_html


@pytest.fixture
def long_text():
    return filler
