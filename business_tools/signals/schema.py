"""
JSON-LD structured data validation.

Every ``application/ld+json`` block of the unstripped document is parsed.
Top-level arrays and ``@graph`` containers are expanded into individual nodes;
a node inherits ``@context`` from its container.
"""

from __future__ import annotations

import json
import re
from collections import Counter
from typing import Any, Iterator

from bs4 import BeautifulSoup

from ..models import SchemaNode, StructuredDataReport

JSONLD_TYPE_RE = re.compile(r"^application/ld\+json$", re.I)

REQUIRED_PROPERTIES = {
    "Article": ["headline", "author", "datePublished"],
    "BlogPosting": ["headline", "author", "datePublished"],
    "NewsArticle": ["headline", "author", "datePublished"],
    "Product": ["name", "description"],
    "Organization": ["name", "url"],
    "WebSite": ["name", "url"],
    "BreadcrumbList": ["itemListElement"],
    "FAQPage": ["mainEntity"],
    "HowTo": ["name", "step"],
    "Recipe": ["name", "ingredients"],
    "Review": ["itemReviewed", "reviewBody", "author"],
    "VideoObject": ["name", "description", "thumbnailUrl"],
    "LocalBusiness": ["name", "address"],
    "Person": ["name"],
}
DEFAULT_REQUIRED = ["name", "description"]
AUTHOR_TYPES = {"Person", "Author"}


def type_list(raw_type: Any) -> list[str]:
    if isinstance(raw_type, list):
        return [str(x).strip() for x in raw_type if str(x).strip()]
    if raw_type is None:
        return []
    value = str(raw_type).strip()
    return [value] if value else []


def type_label(raw_type: Any) -> str:
    return ", ".join(type_list(raw_type))


def get_field(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        if key in value:
            return value[key]
        for k, child in value.items():
            if k.lower() == key.lower():
                return child
    return None


def required_properties(schema_type: str) -> list[str]:
    return REQUIRED_PROPERTIES.get(schema_type, DEFAULT_REQUIRED)


def iter_top_level_nodes(value: Any, inherited_context: Any = None) -> Iterator[tuple[Any, Any]]:
    if isinstance(value, list):
        for child in value:
            yield from iter_top_level_nodes(child, inherited_context)
    elif isinstance(value, dict):
        context = value.get("@context", inherited_context)
        graph = value.get("@graph")
        if isinstance(graph, list) and "@type" not in value:
            for child in graph:
                yield from iter_top_level_nodes(child, context)
        else:
            yield value, context
    else:
        yield value, inherited_context


def is_author_node(node: Any) -> bool:
    if not isinstance(node, dict):
        return False
    if set(type_list(node.get("@type"))) & AUTHOR_TYPES:
        return True
    author = node.get("author")
    authors = author if isinstance(author, list) else [author]
    return any(isinstance(a, dict) and set(type_list(a.get("@type"))) & AUTHOR_TYPES for a in authors)


def collect_structured_data(document: BeautifulSoup) -> StructuredDataReport:
    scripts = document.find_all("script", attrs={"type": JSONLD_TYPE_RE})
    report = StructuredDataReport(has_schema=bool(scripts))
    if not scripts:
        return report

    type_counts: Counter = Counter()
    for script in scripts:
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            report.invalid_schemas.append({"error": "Empty schema content", "content": ""})
            continue
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            report.errors.append(f"Invalid JSON syntax: {exc}")
            report.invalid_schemas.append({"error": f"JSON parse error: {exc}", "content": raw[:100]})
            continue

        for node, context in iter_top_level_nodes(payload):
            if is_author_node(node):
                report.has_author = True
            if isinstance(node, dict) and "BreadcrumbList" in type_list(node.get("@type")):
                report.has_breadcrumb_list = True

            if not context:
                report.errors.append("Missing @context in schema")
                report.invalid_schemas.append({"error": "Missing @context", "content": raw[:100]})
                continue
            types = type_list(node.get("@type")) if isinstance(node, dict) else []
            if not types:
                report.errors.append("Missing @type in schema")
                report.invalid_schemas.append({"error": "Missing @type", "content": raw[:100]})
                continue

            label = type_label(node["@type"])
            report.schema_types.append(label)
            type_counts[label] += 1
            missing = [prop for prop in required_properties(types[0]) if not get_field(node, prop)]
            if missing:
                report.warnings.append(f'Schema type "{label}" missing recommended properties: {", ".join(missing)}')
            report.valid_schemas.append(
                SchemaNode(type=label, context=context, has_required_props=not missing, missing_props=missing)
            )

    for schema_type, count in type_counts.items():
        if count > 1:
            report.conflicts.append(
                {
                    "type": schema_type,
                    "count": count,
                    "message": f"Multiple {schema_type} schemas found ({count}). Google recommends one per page.",
                }
            )

    if report.valid_schemas:
        report.score = 5
        report.score += 2 if not report.errors else 0
        report.score += 2 if not report.warnings else 0
        report.score += 1 if not report.conflicts else 0
    return report
