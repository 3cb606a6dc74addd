"""
Job Source Aggregators

Clients for the job boards and ATS feeds the ingestion pipeline reads from.
Each aggregator implements the base aggregator interface and returns raw
job payloads for normalization.
"""

from .base import BaseAggregator, AggregatorConfig
from .registry import AggregatorRegistry, registry, fetch_from_source

__all__ = [
    'BaseAggregator',
    'AggregatorConfig',
    'AggregatorRegistry',
    'registry',
    'fetch_from_source',
]
