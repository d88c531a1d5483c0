"""
Text Preprocessing & Mention Classification Module

This module cleans raw mention text and defines the classifier contract used
on the ingestion path: classify(text) -> (sentiment, score, topics).
"""

__version__ = "0.1.0"
__author__ = "Mention Analytics Team"
