"""
Aggregator Registry

Maps source names to aggregator classes and runs one source at a time.
"""

from typing import Dict, List, Optional, Type

from pmhnp_hiring.aggregators.base import BaseAggregator, AggregatorConfig, RawJob
from pmhnp_hiring.aggregators.adzuna import AdzunaAggregator
from pmhnp_hiring.aggregators.ashby import AshbyAggregator
from pmhnp_hiring.aggregators.greenhouse import GreenhouseAggregator
from pmhnp_hiring.aggregators.jooble import JoobleAggregator
from pmhnp_hiring.aggregators.jsearch import JSearchAggregator
from pmhnp_hiring.aggregators.lever import LeverAggregator
from pmhnp_hiring.aggregators.usajobs import USAJobsAggregator
from pmhnp_hiring.aggregators.workday import WorkdayAggregator
from pmhnp_hiring.core.exceptions import UnknownSourceException
from pmhnp_hiring.utils.logger import get_logger, log_ingestion_activity

logger = get_logger(__name__)


class AggregatorRegistry:
    """
    Registry of available job sources.
    """

    def __init__(self) -> None:
        self.aggregators: Dict[str, Type[BaseAggregator]] = {}

    def register_aggregator(self, name: str, aggregator_class: Type[BaseAggregator]) -> None:
        """
        Register an aggregator class.

        Args:
            name: Source name used by the API and scheduler
            aggregator_class: Class to instantiate per run
        """
        self.aggregators[name] = aggregator_class
        logger.debug(f"Registered aggregator: {name}")

    def get(self, name: str) -> Type[BaseAggregator]:
        if name not in self.aggregators:
            raise UnknownSourceException(name)
        return self.aggregators[name]

    def names(self) -> List[str]:
        return list(self.aggregators)

    def create(self, name: str, config: Optional[AggregatorConfig] = None) -> BaseAggregator:
        return self.get(name)(config=config)


registry = AggregatorRegistry()
registry.register_aggregator("adzuna", AdzunaAggregator)
registry.register_aggregator("usajobs", USAJobsAggregator)
registry.register_aggregator("greenhouse", GreenhouseAggregator)
registry.register_aggregator("lever", LeverAggregator)
registry.register_aggregator("jooble", JoobleAggregator)
registry.register_aggregator("jsearch", JSearchAggregator)
registry.register_aggregator("ashby", AshbyAggregator)
registry.register_aggregator("workday", WorkdayAggregator)


async def fetch_from_source(
    source: str,
    chunk: Optional[int] = None,
    config: Optional[AggregatorConfig] = None
) -> List[RawJob]:
    """
    Fetch raw jobs from one source.

    Args:
        source: Registered source name
        chunk: Work slice for chunked sources (Greenhouse, Workday)
        config: Optional fetch configuration

    Returns:
        List[RawJob]: Raw jobs; empty when the source lacks credentials

    Raises:
        UnknownSourceException: If the source is not registered
    """
    aggregator = registry.create(source, config)

    if not aggregator.has_credentials():
        logger.warning(f"Credentials for {source} are not configured, skipping")
        return []

    async with aggregator:
        jobs = await aggregator.fetch_jobs(chunk=chunk)
        stats = aggregator.get_stats()

    log_ingestion_activity(
        source,
        "fetched",
        chunk=chunk,
        jobs=len(jobs),
        requests=stats["requests"],
        errors=stats["errors"]
    )
    return jobs
