"""
Test Suite Module

This module contains all tests for the mention analytics system,
including unit tests, integration tests, and test utilities.
"""

__version__ = "0.1.0"
__author__ = "Mention Analytics Team"
