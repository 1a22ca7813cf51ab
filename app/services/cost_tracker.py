from __future__ import annotations

import logging
import time
from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Operation = Literal["hotelMatching", "aiInsights"]

# USD per token
INPUT_TOKEN_PRICE = 3.0 / 1_000_000
OUTPUT_TOKEN_PRICE = 15.0 / 1_000_000


class OperationCost(BaseModel):
    tokens: int = 0
    cost: float = 0.0


class SearchCost(BaseModel):
    search_id: str
    user_query: str = ""
    destination: str = ""
    hotel_count: int = 0
    started_at: float
    total_tokens: int = 0
    total_cost: float = 0.0
    operations: dict[str, OperationCost] = {}


class SearchCostRecord(BaseModel):
    timestamp: datetime
    search_id: str
    user_query: str
    destination: str
    hotel_count: int
    total_tokens: int
    total_cost: float
    search_duration_ms: float
    operations: dict[str, OperationCost]


class SearchCostTracker:
    """In-memory token/cost ledger keyed by search id.

    ``add_usage`` is synchronous so the generation pipeline can report usage
    without awaiting anything.
    """

    def __init__(self, max_records: int = 1000) -> None:
        self._active: dict[str, SearchCost] = {}
        self._records: list[SearchCostRecord] = []
        self._max_records = max_records

    def start_search(
        self,
        search_id: str,
        user_query: str = "",
        destination: str = "",
        hotel_count: int = 0,
    ) -> SearchCost:
        search = SearchCost(
            search_id=search_id,
            user_query=user_query,
            destination=destination,
            hotel_count=hotel_count,
            started_at=time.monotonic(),
        )
        self._active[search_id] = search
        logger.info("Started cost tracking for search %s", search_id)
        return search

    def get_search(self, search_id: str) -> SearchCost | None:
        return self._active.get(search_id)

    def add_usage(
        self,
        search_id: str,
        operation: Operation,
        input_tokens: int,
        output_tokens: int,
    ) -> float:
        search = self._active.get(search_id)
        if search is None:
            # Insights can be requested for a search this process did not start
            search = self.start_search(search_id)

        cost = input_tokens * INPUT_TOKEN_PRICE + output_tokens * OUTPUT_TOKEN_PRICE
        tokens = input_tokens + output_tokens

        op = search.operations.setdefault(operation, OperationCost())
        op.tokens += tokens
        op.cost += cost
        search.total_tokens += tokens
        search.total_cost += cost

        logger.debug(
            "Added %s usage to search %s: $%.4f (%d tokens)", operation, search_id, cost, tokens
        )
        return cost

    def finish_search(self, search_id: str) -> SearchCostRecord | None:
        search = self._active.pop(search_id, None)
        if search is None:
            logger.warning("Search %s not found for cost tracking", search_id)
            return None

        record = SearchCostRecord(
            timestamp=datetime.now(timezone.utc),
            search_id=search_id,
            user_query=search.user_query,
            destination=search.destination,
            hotel_count=search.hotel_count,
            total_tokens=search.total_tokens,
            total_cost=search.total_cost,
            search_duration_ms=(time.monotonic() - search.started_at) * 1000,
            operations=search.operations,
        )
        self._records.append(record)
        if len(self._records) > self._max_records:
            self._records = self._records[-self._max_records:]

        logger.info(
            "Search %s complete: $%.4f (%d tokens)", search_id, record.total_cost, record.total_tokens
        )
        return record

    def records_for(self, day: date) -> list[SearchCostRecord]:
        return [r for r in self._records if r.timestamp.date() == day]

    def daily_report(self, day: date | None = None) -> dict:
        day = day or datetime.now(timezone.utc).date()
        records = self.records_for(day)
        total_cost = sum(r.total_cost for r in records)
        return {
            "date": day.isoformat(),
            "total_searches": len(records),
            "total_cost": round(total_cost, 6),
            "total_tokens": sum(r.total_tokens for r in records),
            "average_cost": round(total_cost / len(records), 6) if records else 0.0,
            "searches": [r.model_dump(mode="json") for r in records],
        }
