from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from loguru import logger

from bet_insights.models.evidence import MatchEvidence
from bet_insights.models.match import Match


class RefreshCycle:
    """Per-day enrichment bookkeeping.

    A match id moves from never attempted to `pending` and then to exactly one
    of `succeeded` or `failed`; once there it is never requested again until
    the cycle restarts. Changing the target date or forcing a refresh starts
    a new generation, and anything recorded under an older generation is
    dropped.
    """

    def __init__(self, batch_size: int = 5):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.batch_size = batch_size
        self.target_date: Optional[date] = None
        self.generation = 0
        self._reset()

    def _reset(self) -> None:
        self.pending: Set[int] = set()
        self.succeeded: Set[int] = set()
        self.failed: Set[int] = set()
        self.evidence: Dict[int, MatchEvidence] = {}
        self.warnings: List[str] = []
        self.provider_disabled = False

    def start(self, target_date: date, force: bool = False) -> int:
        """Begins a new cycle when the date changed or a refresh is forced.

        Returns the generation callers must hand back when recording results.
        """
        if force or target_date != self.target_date:
            self.generation += 1
            self.target_date = target_date
            self._reset()
            logger.debug(f"Refresh cycle {self.generation} started for {target_date.isoformat()}")
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def attempted(self, match_id: int) -> bool:
        return (
            match_id in self.pending
            or match_id in self.succeeded
            or match_id in self.failed
        )

    def next_batch(self, matches: Iterable[Match]) -> List[Match]:
        """Claims up to `batch_size` upcoming matches never attempted in this cycle."""
        if self.provider_disabled:
            return []
        batch: List[Match] = []
        for match in matches:
            if len(batch) >= self.batch_size:
                break
            if not match.is_scheduled or self.attempted(match.match_id):
                continue
            batch.append(match)
        for match in batch:
            self.pending.add(match.match_id)
        return batch

    def remaining(self, matches: Iterable[Match]) -> int:
        """Counts upcoming matches this cycle has not attempted yet."""
        if self.provider_disabled:
            return 0
        return sum(1 for m in matches if m.is_scheduled and not self.attempted(m.match_id))

    def has_remaining(self, matches: Iterable[Match]) -> bool:
        return self.remaining(matches) > 0

    def _store(self, generation: int, match_id: int, evidence: Optional[MatchEvidence]) -> bool:
        if not self.is_current(generation):
            logger.debug(
                f"Discarding result for match {match_id} from stale generation {generation}"
            )
            return False
        if match_id in self.succeeded or match_id in self.failed:
            logger.warning(f"Match {match_id} already settled in this cycle, ignoring.")
            return False
        self.pending.discard(match_id)
        if evidence is not None:
            self.evidence[match_id] = evidence
        return True

    def record_success(self, generation: int, match_id: int, evidence: MatchEvidence) -> bool:
        if not self._store(generation, match_id, evidence):
            return False
        self.succeeded.add(match_id)
        return True

    def record_failure(
        self,
        generation: int,
        match_id: int,
        reason: str,
        evidence: Optional[MatchEvidence] = None,
    ) -> bool:
        """Marks a match permanently failed; partial evidence is still kept."""
        if not self._store(generation, match_id, evidence):
            return False
        self.failed.add(match_id)
        self.warnings.append(reason)
        return True

    def disable_provider(self, generation: int, reason: str) -> None:
        if not self.is_current(generation) or self.provider_disabled:
            return
        self.provider_disabled = True
        self.warnings.append(reason)
        logger.error(f"Match provider disabled for the rest of this cycle: {reason}")
