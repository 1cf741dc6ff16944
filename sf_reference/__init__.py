"""Salesforce object reference scraper and read layer."""

__version__ = '1.0.0'
