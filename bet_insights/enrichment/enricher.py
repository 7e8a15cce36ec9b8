# bet_insights/enrichment/enricher.py

import asyncio
from datetime import date
from typing import Dict, List, Optional, Sequence

from loguru import logger

from bet_insights.calculation.form_evaluator import empty_form, evaluate_form
from bet_insights.calculation.head_to_head import analyze_head_to_head
from bet_insights.config.settings import settings
from bet_insights.models.evidence import MatchEvidence
from bet_insights.models.match import Match
from bet_insights.models.suggestion import RateLimitInfo
from .refresh_cycle import RefreshCycle

OK = "ok"
PARTIAL = "partial"
FAILED = "failed"


def _raise_if_cancelled(results: Sequence[object]) -> None:
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result


class MatchEnricher:
    """Fetches recent form and head-to-head evidence for the day's upcoming matches.

    Work is done in batches claimed from a RefreshCycle; every match in a
    batch is fetched concurrently and independently of the others.
    """

    def __init__(
        self,
        provider,
        cycle: Optional[RefreshCycle] = None,
        form_count: Optional[int] = None,
        h2h_count: Optional[int] = None,
    ):
        self.provider = provider
        self.cycle = cycle or RefreshCycle(batch_size=settings.enrichment_batch_size)
        self.form_count = form_count or settings.form_match_count
        self.h2h_count = h2h_count or settings.h2h_match_count

    @property
    def rate_limit(self) -> Optional[RateLimitInfo]:
        return getattr(self.provider, "rate_limit", None)

    @property
    def warnings(self) -> List[str]:
        return list(self.cycle.warnings)

    @property
    def provider_disabled(self) -> bool:
        return self.cycle.provider_disabled

    async def _enrich_match(self, generation: int, match: Match) -> str:
        home, away = match.home_team, match.away_team
        results = await asyncio.gather(
            self.provider.list_recent_matches(home.team_id, self.form_count),
            self.provider.list_recent_matches(away.team_id, self.form_count),
            self.provider.list_head_to_head(home.team_id, away.team_id, self.h2h_count),
            return_exceptions=True,
        )
        _raise_if_cancelled(results)
        home_recent, away_recent, meetings = results
        errors = [r for r in results if isinstance(r, Exception)]

        evidence = MatchEvidence(
            home_form=(
                empty_form(home.team_id, home.name)
                if isinstance(home_recent, Exception)
                else evaluate_form(home.team_id, home.name, home_recent)
            ),
            away_form=(
                empty_form(away.team_id, away.name)
                if isinstance(away_recent, Exception)
                else evaluate_form(away.team_id, away.name, away_recent)
            ),
            head_to_head=(
                None
                if isinstance(meetings, Exception)
                else analyze_head_to_head(
                    home.team_id, home.name, away.team_id, away.name, meetings
                )
            ),
        )

        if not errors:
            self.cycle.record_success(generation, match.match_id, evidence)
            return OK

        reason = f"Could not load data for {home.name} vs {away.name}: {errors[0]}"
        logger.warning(reason)
        self.cycle.record_failure(generation, match.match_id, reason, evidence)
        return FAILED if len(errors) == len(results) else PARTIAL

    async def _enrich_batch(self, generation: int, batch: List[Match]) -> None:
        outcomes = await asyncio.gather(
            *(self._enrich_match(generation, match) for match in batch),
            return_exceptions=True,
        )
        _raise_if_cancelled(outcomes)
        for match, outcome in zip(batch, outcomes):
            if isinstance(outcome, Exception):
                # Unexpected error while evaluating, not while fetching
                logger.exception(f"Enrichment crashed for match {match.match_id}: {outcome}")
                self.cycle.record_failure(
                    generation, match.match_id, f"Could not process match {match.match_id}"
                )

        if batch and all(outcome == FAILED or isinstance(outcome, Exception) for outcome in outcomes):
            self.cycle.disable_provider(
                generation,
                f"Every request in the last batch of {len(batch)} matches failed; "
                "the match provider is unavailable",
            )

    async def refresh(
        self,
        target_date: date,
        matches: Sequence[Match],
        force: bool = False,
        max_batches: Optional[int] = 1,
    ) -> Dict[int, MatchEvidence]:
        """Enriches up to `max_batches` batches (None for all) and returns the cycle's evidence."""
        generation = self.cycle.start(target_date, force)
        batches = 0
        while max_batches is None or batches < max_batches:
            batch = self.cycle.next_batch(matches)
            if not batch:
                break
            logger.info(f"Enriching {len(batch)} matches (batch {batches + 1}).")
            await self._enrich_batch(generation, batch)
            batches += 1
            if not self.cycle.is_current(generation):
                break

        succeeded = len(self.cycle.succeeded)
        failed = len(self.cycle.failed)
        logger.success(
            f"Enrichment for {target_date.isoformat()}: {succeeded} ok, {failed} failed."
        )
        return dict(self.cycle.evidence)
