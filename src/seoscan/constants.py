# src/seoscan/constants.py
"""Centralized constants for the SEO audit engine.

This module contains magic numbers and fixed vocabularies used across
multiple modules. For user-configurable thresholds, see config.py
(AnalysisThresholds, ContentPenalties, ScoringWeights).
"""

# =============================================================================
# Fetcher Constants
# =============================================================================

# Identifying user agent sent with every target-site fetch
DEFAULT_USER_AGENT = "SEOScan-Pro/1.0 (SEO Analysis Bot)"

# Accept header for target-site fetches
HTML_ACCEPT_HEADER = "text/html,application/xhtml+xml"

# Default transport timeout (seconds) for target-site fetches
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0


# =============================================================================
# Facet Analyzer Constants
# =============================================================================

# Link targets that are never analyzed
SKIPPED_LINK_PREFIXES = ("#", "javascript:", "mailto:", "tel:")

# Anchor texts that say nothing about the link target
GENERIC_ANCHOR_TEXTS = frozenset({
    "click here",
    "read more",
    "learn more",
    "here",
    "link",
    "more",
})

# Characters of a JSON-LD block kept as the raw sample
SCHEMA_RAW_SAMPLE_LENGTH = 500

# Characters of an image src / link href shown in issue descriptions
SUBJECT_PREVIEW_LENGTH = 50


# =============================================================================
# PageSpeed Insights Constants
# =============================================================================

PSI_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

# Categories requested from the provider
PSI_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

# Device classes, queried once each
DEVICE_CLASSES = ("mobile", "desktop")

# Provider quota: 400 requests per 100 seconds
PSI_RATE_LIMIT_REQUESTS = 400
PSI_RATE_LIMIT_WINDOW_SECONDS = 100

# Max concurrent provider requests per client
PSI_MAX_CONCURRENT_REQUESTS = 4

# Default transport timeout (seconds) for provider calls
DEFAULT_PSI_TIMEOUT_SECONDS = 120.0

# Opportunities / diagnostics kept per run, in provider order
MAX_OPPORTUNITIES = 10
MAX_DIAGNOSTICS = 10

# Display modes that never count as a failing audit
NON_SCORED_DISPLAY_MODES = frozenset({"notApplicable", "manual", "error"})

# Scores at or above this (but below 1) are in the passing band and not reported
PSI_PASSING_SCORE = 0.9


# =============================================================================
# Core Web Vitals Thresholds (good <= value, poor > value)
# =============================================================================

LCP_GOOD_MS = 2500
LCP_POOR_MS = 4000
FID_GOOD_MS = 100
FID_POOR_MS = 300
CLS_GOOD_THRESHOLD = 0.1
CLS_POOR_THRESHOLD = 0.25
FCP_GOOD_MS = 1800
FCP_POOR_MS = 3000
TTFB_GOOD_MS = 800
TTFB_POOR_MS = 1800


# =============================================================================
# Report Constants
# =============================================================================

# Number of issues reshaped into recommendations
MAX_RECOMMENDATIONS = 8

# Numeric value above which fixing a provider audit is more than a quick win
QUICK_EFFORT_NUMERIC_LIMIT = 1000

# Pages analyzed per audit (single-page audits)
PAGES_PER_AUDIT = 1
