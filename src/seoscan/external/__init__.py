"""Clients for external performance providers."""

from .pagespeed_insights import PageSpeedInsightsAPI, parse_pagespeed_response

__all__ = ["PageSpeedInsightsAPI", "parse_pagespeed_response"]
