"""
Slot recommendation - scores availability slots and ranks them into tiers
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from config.settings import Config
from src.availability.models import (
    AvailableSlot, Recommendation, RecommendationResult, RecommendationTier, SlotType,
)

logger = logging.getLogger(__name__)


class SlotRecommender:
    """
    Ranks slots with a weighted score:

    - a flat bonus for slots where every member is free, and a smaller bonus
      for negotiable slots scaled by the share of free members
    - closeness of the slot duration to the requested meeting duration, plus
      an extra bonus on an exact fit
    - recency: slots starting sooner after ``now`` score higher
    - overlap with the preferred business-hours sub-window

    Weights come from ``Config.RECOMMENDER_WEIGHTS`` unless given explicitly.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None,
                 best_size: Optional[int] = None,
                 alternative_size: Optional[int] = None,
                 best_cutoff: Optional[float] = None,
                 business_hours: Optional[Tuple[int, int]] = None):
        self.weights = dict(Config.RECOMMENDER_WEIGHTS)
        if weights:
            self.weights.update(weights)
        self.best_size = Config.BEST_TIER_SIZE if best_size is None else best_size
        self.alternative_size = Config.ALTERNATIVE_TIER_SIZE if alternative_size is None else alternative_size
        self.best_cutoff = Config.BEST_SCORE_CUTOFF if best_cutoff is None else best_cutoff
        if business_hours is None:
            business_hours = (Config.BUSINESS_HOURS_START * 60, Config.BUSINESS_HOURS_END * 60)
        self.business_start, self.business_end = business_hours

    def score_slot(self, slot: AvailableSlot, target_duration: Optional[int] = None,
                   now: Optional[datetime] = None, horizon_minutes: float = 0.0) -> float:
        score = 0.0

        if slot.type == SlotType.AVAILABLE:
            score += self.weights["available"]
        else:
            group_size = len(slot.available_members) + len(slot.conflicting_members)
            score += self.weights["negotiable"] * len(slot.available_members) / group_size

        duration = slot.duration_minutes
        if target_duration:
            score += self.weights["duration_fit"] * min(duration, target_duration) / max(duration, target_duration)
            if duration == target_duration:
                score += self.weights["exact_fit"]

        if now is not None and horizon_minutes > 0:
            offset = self._minutes_until(slot, now)
            score += self.weights["recency"] * (1.0 - offset / horizon_minutes)
        else:
            score += self.weights["recency"]

        overlap = min(slot.end_minute, self.business_end) - max(slot.start_minute, self.business_start)
        if overlap > 0:
            score += self.weights["business_hours"] * overlap / duration

        return score

    def recommend(self, slots: List[AvailableSlot], target_duration: Optional[int] = None,
                  now: Optional[datetime] = None) -> RecommendationResult:
        now = self._local_now(now)
        total_available = sum(1 for s in slots if s.type == SlotType.AVAILABLE)
        total_negotiable = len(slots) - total_available

        # Slots that are already over cannot be recommended
        candidates = [slot for slot in slots if slot.end_datetime() > now]
        horizon = max((self._minutes_until(slot, now) for slot in candidates), default=0.0)

        ranked = sorted(
            ((self.score_slot(slot, target_duration, now, horizon), slot) for slot in candidates),
            key=lambda pair: (-pair[0], pair[1].date, pair[1].start_minute),
        )

        has_available = any(slot.type == SlotType.AVAILABLE for _, slot in ranked)
        best_indexes = []
        if has_available:
            for index, (score, slot) in enumerate(ranked):
                if len(best_indexes) >= self.best_size:
                    break
                if slot.type == SlotType.AVAILABLE and score >= self.best_cutoff:
                    best_indexes.append(index)

        chosen = set(best_indexes)
        alternative_indexes = [i for i in range(len(ranked)) if i not in chosen][:self.alternative_size]

        recommendations = []
        for index in sorted(chosen.union(alternative_indexes)):
            score, slot = ranked[index]
            tier = RecommendationTier.BEST if index in chosen else RecommendationTier.ALTERNATIVE
            recommendations.append(Recommendation(
                slot=slot,
                score=score,
                tier=tier,
                reason=self._reason(slot, target_duration),
            ))

        degraded = not has_available
        if degraded:
            logger.info("⚠️  No slot with every member free, falling back to negotiable slots")

        logger.info(f"🎯 Recommended {len(best_indexes)} best and {len(alternative_indexes)} alternative "
                    f"slots out of {len(candidates)} candidates")

        return RecommendationResult(
            recommendations=recommendations,
            degraded=degraded,
            total_available=total_available,
            total_negotiable=total_negotiable,
        )

    @staticmethod
    def _local_now(now: Optional[datetime]) -> datetime:
        # Slot datetimes are naive local times
        if now is None:
            return datetime.now()
        if now.tzinfo is not None:
            return now.astimezone(ZoneInfo(Config.TIMEZONE)).replace(tzinfo=None)
        return now

    @staticmethod
    def _minutes_until(slot: AvailableSlot, now: datetime) -> float:
        return max(0.0, (slot.start_datetime() - now).total_seconds() / 60)

    @staticmethod
    def _reason(slot: AvailableSlot, target_duration: Optional[int]) -> str:
        if slot.type == SlotType.AVAILABLE:
            reason = "All members available"
            if target_duration and slot.duration_minutes == target_duration:
                reason += f", fits the requested {target_duration} min"
            return reason

        count = len(slot.conflicting_members)
        if count == 1:
            return "1 member has a conflict"
        return f"{count} members have conflicts"
