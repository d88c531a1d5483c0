"""
Dashboard Data Module

This module builds dashboard payloads for brand mention analytics: widget
configuration and projection, generated insights and the overview, summary
and spike-alert responses.
"""

__version__ = "0.1.0"
__author__ = "Mention Analytics Team"
