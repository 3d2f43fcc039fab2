"""
Structured Data Analyzer

Detects Schema.org markup in two formats:
- JSON-LD (<script type="application/ld+json">)
- Microdata (elements carrying itemtype)

The analyzer keeps no state between calls; analyzing the same document
twice yields identical results.
"""

import json
from typing import Any

from bs4 import BeautifulSoup

from seoscan.constants import SCHEMA_RAW_SAMPLE_LENGTH
from seoscan.models import (
    FacetIssue,
    IssueType,
    SchemaAnalysis,
    SchemaFormat,
    SchemaInfo,
    Severity,
)


def extract_schema_types(node: Any) -> list[str]:
    """Collect every @type in a parsed JSON-LD value.

    Handles top-level arrays, @type arrays and @graph nesting (recursively).
    """
    types: list[str] = []

    if isinstance(node, list):
        for item in node:
            types.extend(extract_schema_types(item))
    elif isinstance(node, dict):
        schema_type = node.get("@type")
        if schema_type:
            if isinstance(schema_type, list):
                types.extend(str(t) for t in schema_type)
            else:
                types.append(str(schema_type))
        if node.get("@graph"):
            types.extend(extract_schema_types(node["@graph"]))

    return types


class StructuredDataAnalyzer:
    """Analyze structured data markup on a web page."""

    def analyze(self, soup: BeautifulSoup, url: str = "") -> SchemaAnalysis:
        """
        Analyze structured data on a page.

        Args:
            soup: BeautifulSoup parsed HTML
            url: Page URL

        Returns:
            SchemaAnalysis with detected schemas and issues
        """
        schemas: list[SchemaInfo] = []
        issues: list[FacetIssue] = []

        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            content = script.get_text()
            if not content:
                continue
            # Pathologically nested blocks overflow the decoder or the @graph walk
            try:
                block_types = extract_schema_types(json.loads(content))
            except (json.JSONDecodeError, RecursionError):
                issues.append(FacetIssue(
                    type=IssueType.INVALID_JSON,
                    message="Invalid JSON-LD structured data found",
                    severity=Severity.CRITICAL,
                ))
                continue

            raw = content[:SCHEMA_RAW_SAMPLE_LENGTH]
            for schema_type in block_types:
                schemas.append(SchemaInfo(type=schema_type, format=SchemaFormat.JSON_LD, raw=raw))

        for element in soup.find_all(attrs={"itemtype": True}):
            itemtype = element.get("itemtype") or ""
            if isinstance(itemtype, list):
                itemtype = " ".join(itemtype)
            # Last path segment of the type URI, e.g. https://schema.org/Product
            schema_type = itemtype.split("/")[-1] or itemtype
            schemas.append(SchemaInfo(type=schema_type, format=SchemaFormat.MICRODATA))

        has_schema = len(schemas) > 0
        if not has_schema:
            issues.append(FacetIssue(
                type=IssueType.MISSING_SCHEMA,
                message="No structured data (Schema.org) found on the page",
                severity=Severity.WARNING,
            ))

        return SchemaAnalysis(
            has_schema=has_schema,
            schemas=schemas,
            jsonld_count=sum(1 for s in schemas if s.format == SchemaFormat.JSON_LD),
            microdata_count=sum(1 for s in schemas if s.format == SchemaFormat.MICRODATA),
            issues=issues,
        )
