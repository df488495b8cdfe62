"""
Risk Scoring Engine - Advisory Source.

Interface of the travel advisory collaborator, plus an in-memory
implementation for callers that already hold advisory records
(cached lookups, tests, offline reports).

Fetching advisories over the network is the caller's concern;
the engine only reads AdvisoryRecord values.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from .types import AdvisoryNotFoundError, AdvisoryRecord


logger = logging.getLogger(__name__)


class AdvisorySource(ABC):
    """Supplies the advisory record for a destination."""

    @abstractmethod
    def get_advisory(self, destination: str) -> AdvisoryRecord:
        """
        Return the advisory for a destination.

        Raises:
            AdvisoryNotFoundError: If no record exists
        """
        pass

    def get_advisories(self, destinations: Iterable[str]) -> List[AdvisoryRecord]:
        """Advisories for several destinations, in input order."""
        return [self.get_advisory(destination) for destination in destinations]


class StaticAdvisorySource(AdvisorySource):
    """
    Advisory source backed by a fixed set of records.

    Destinations are matched case-insensitively against the
    country code, then the country name.
    """

    def __init__(self, records: Optional[Iterable[AdvisoryRecord]] = None) -> None:
        self._by_code: Dict[str, AdvisoryRecord] = {}
        self._by_name: Dict[str, AdvisoryRecord] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: AdvisoryRecord) -> None:
        """Register or replace the record for its country."""
        self._by_code[record.country_code.strip().upper()] = record
        if record.country_name:
            self._by_name[record.country_name.strip().lower()] = record

    def get_advisory(self, destination: str) -> AdvisoryRecord:
        key = (destination or "").strip()
        record = self._by_code.get(key.upper()) or self._by_name.get(key.lower())
        if record is None:
            logger.debug(f"No advisory record for '{destination}'")
            raise AdvisoryNotFoundError(destination)
        return record

    def __contains__(self, destination: str) -> bool:
        key = (destination or "").strip()
        return key.upper() in self._by_code or key.lower() in self._by_name

    def __len__(self) -> int:
        return len(self._by_code)
