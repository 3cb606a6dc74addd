"""
PMHNP Hiring Backend

Multi-source job ingestion and deduplication pipeline for psychiatric
nurse practitioner job listings.
"""

__version__ = "1.0.0"
