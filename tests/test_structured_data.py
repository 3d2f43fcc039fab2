"""Tests for the structured data analyzer."""

import json

from bs4 import BeautifulSoup

from seoscan.models import IssueType, SchemaFormat, SchemaInfo, Severity
from seoscan.structured_data import StructuredDataAnalyzer, extract_schema_types


def soup_for(body):
    return BeautifulSoup(f"<html><head></head><body>{body}</body></html>", "lxml")


def jsonld(data):
    content = data if isinstance(data, str) else json.dumps(data)
    return f'<script type="application/ld+json">{content}</script>'


class TestExtractSchemaTypes:

    def test_single_type(self):
        assert extract_schema_types({"@type": "Organization"}) == ["Organization"]

    def test_type_array(self):
        assert extract_schema_types({"@type": ["Product", "Thing"]}) == ["Product", "Thing"]

    def test_top_level_array_and_graph(self):
        data = [
            {"@type": "WebSite"},
            {"@graph": [{"@type": "Article"}, {"@graph": [{"@type": "Person"}]}]},
        ]
        assert extract_schema_types(data) == ["WebSite", "Article", "Person"]

    def test_untyped_values(self):
        assert extract_schema_types({"name": "x"}) == []
        assert extract_schema_types("Organization") == []


class TestStructuredDataAnalyzer:
    """Test cases for StructuredDataAnalyzer."""

    def test_jsonld_organization(self):
        result = StructuredDataAnalyzer().analyze(soup_for(jsonld({"@type": "Organization", "name": "Acme"})))

        assert result.has_schema is True
        assert [(s.type, s.format) for s in result.schemas] == [("Organization", SchemaFormat.JSON_LD)]
        assert result.jsonld_count == 1
        assert result.issues == []

    def test_graph_nesting(self):
        data = {
            "@context": "https://schema.org",
            "@graph": [{"@type": "WebSite"}, {"@type": "BreadcrumbList"}],
        }
        result = StructuredDataAnalyzer().analyze(soup_for(jsonld(data)))
        assert result.schema_types == ["WebSite", "BreadcrumbList"]

    def test_invalid_json_is_critical(self):
        result = StructuredDataAnalyzer().analyze(soup_for(jsonld('{"@type": "Organization",')))

        assert [i.type for i in result.issues] == [IssueType.INVALID_JSON, IssueType.MISSING_SCHEMA]
        assert result.issues[0].severity == Severity.CRITICAL

    def test_invalid_block_does_not_hide_valid_ones(self):
        body = jsonld("{not json}") + jsonld({"@type": "Product"})
        result = StructuredDataAnalyzer().analyze(soup_for(body))

        assert result.schema_types == ["Product"]
        assert [i.type for i in result.issues] == [IssueType.INVALID_JSON]

    def test_deeply_nested_block_is_invalid_json(self):
        depth = 100000
        body = jsonld("[" * depth + "]" * depth) + jsonld({"@type": "Organization"})
        result = StructuredDataAnalyzer().analyze(soup_for(body))

        assert result.schema_types == ["Organization"]
        assert [i.type for i in result.issues] == [IssueType.INVALID_JSON]

    def test_microdata(self):
        body = (
            '<div itemscope itemtype="https://schema.org/Product">'
            '<span itemprop="name">Widget</span>'
            '<div itemprop="offers" itemscope itemtype="http://schema.org/Offer"></div>'
            '</div>'
        )
        result = StructuredDataAnalyzer().analyze(soup_for(body))

        assert result.schemas == [
            SchemaInfo(type="Product", format=SchemaFormat.MICRODATA),
            SchemaInfo(type="Offer", format=SchemaFormat.MICRODATA),
        ]
        assert result.microdata_count == 2

    def test_no_schema_is_warning(self):
        result = StructuredDataAnalyzer().analyze(soup_for("<p>Nothing here</p>"))

        assert result.has_schema is False
        assert len(result.issues) == 1
        assert result.issues[0].type == IssueType.MISSING_SCHEMA
        assert result.issues[0].severity == Severity.WARNING

    def test_raw_sample_is_capped(self):
        data = {"@type": "Article", "articleBody": "x" * 2000}
        result = StructuredDataAnalyzer().analyze(soup_for(jsonld(data)))
        assert len(result.schemas[0].raw) == 500

    def test_analyzing_twice_is_identical(self):
        body = jsonld({"@type": ["Product", "Thing"]}) + jsonld("{broken") + (
            '<div itemscope itemtype="https://schema.org/Review"></div>'
        )
        soup = soup_for(body)
        analyzer = StructuredDataAnalyzer()

        first = analyzer.analyze(soup)
        second = analyzer.analyze(soup)

        assert first.schema_types == second.schema_types == ["Product", "Thing", "Review"]
        assert first.issues == second.issues
        assert first == second
