"""Cancellable, last-request-wins recomputation of equity analyses."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime

from pydantic import BaseModel

from .classifier import classify_participants
from .heatmap import generate_slots, top_suggestions
from .holidays import HolidayGateway
from .scoring import calculate_equity_score
from .types import EquityScoreResult, HeatmapSlot, Participant, ParticipantStatus, WorkingHoursConfig

logger = logging.getLogger(__name__)


class AnalysisRequest(BaseModel):
    """Inputs of one recomputation: who, when, and which day to search."""

    participants: list[Participant] = []
    proposed_time: datetime | None = None
    analysis_date: date | None = None
    overrides: dict[str, WorkingHoursConfig] = {}
    suggestion_count: int = 3


class AnalysisResult(BaseModel):
    generation: int
    statuses: list[ParticipantStatus] = []
    score: EquityScoreResult | None = None
    slots: list[HeatmapSlot] = []
    suggestions: list[HeatmapSlot] = []


Compute = Callable[[AnalysisRequest, HolidayGateway | None, int], Awaitable[AnalysisResult]]
Listener = Callable[[AnalysisResult], None]


async def run_analysis(
    request: AnalysisRequest,
    gateway: HolidayGateway | None = None,
    generation: int = 0,
) -> AnalysisResult:
    """Compute statuses and score for the proposed time and/or the day's heatmap."""
    statuses: list[ParticipantStatus] = []
    score = None
    if request.proposed_time is not None:
        statuses = await classify_participants(
            request.participants, request.proposed_time, request.overrides, gateway
        )
        score = calculate_equity_score(statuses)

    slots: list[HeatmapSlot] = []
    suggestions: list[HeatmapSlot] = []
    if request.analysis_date is not None:
        slots = await generate_slots(
            request.analysis_date, request.participants, request.overrides, gateway
        )
        suggestions = top_suggestions(slots, request.suggestion_count)

    return AnalysisResult(
        generation=generation,
        statuses=statuses,
        score=score,
        slots=slots,
        suggestions=suggestions,
    )


class RecomputationCoordinator:
    """Runs analyses in the background so only the latest request is surfaced.

    Every :meth:`submit` takes a new generation token and cancels the
    in-flight computation. A finished computation is applied only if its
    token is still the current generation; anything older is discarded.
    Must be used from a single event loop.
    """

    def __init__(
        self,
        gateway: HolidayGateway | None = None,
        *,
        debounce_seconds: float = 0.0,
        compute: Compute = run_analysis,
    ) -> None:
        self._gateway = gateway
        self._debounce = debounce_seconds
        self._compute = compute
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._latest: AnalysisResult | None = None
        self._listeners: list[Listener] = []
        self.last_error: BaseException | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def gateway(self) -> HolidayGateway | None:
        return self._gateway

    @gateway.setter
    def gateway(self, gateway: HolidayGateway | None) -> None:
        """Use *gateway* for computations submitted from now on."""
        self._gateway = gateway

    @property
    def latest(self) -> AnalysisResult | None:
        """The most recently applied result."""
        return self._latest

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with every applied result; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def submit(self, request: AnalysisRequest) -> int:
        """Start a recomputation for *request* and return its generation token."""
        self._generation += 1
        generation = self._generation
        if self.busy:
            self._task.cancel()  # type: ignore[union-attr]
        self._task = asyncio.get_running_loop().create_task(
            self._run(request, generation), name=f"equity-recompute-{generation}"
        )
        return generation

    async def _run(self, request: AnalysisRequest, generation: int) -> None:
        try:
            if self._debounce > 0:
                await asyncio.sleep(self._debounce)
            result = await self._compute(request, self._gateway, generation)
        except asyncio.CancelledError:
            logger.debug("Recompute generation %d cancelled", generation)
            raise
        except Exception as e:
            if generation == self._generation:
                self.last_error = e
                logger.exception("Recompute generation %d failed", generation)
            return
        self.apply(generation, result)

    def apply(self, generation: int, result: AnalysisResult) -> bool:
        """Surface *result* if *generation* is current; returns whether it was applied."""
        if generation != self._generation:
            logger.debug(
                "Discarding stale result for generation %d (current %d)",
                generation,
                self._generation,
            )
            return False
        self._latest = result
        self.last_error = None
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                logger.exception("Listener failed for generation %d", generation)
        return True

    async def wait(self) -> AnalysisResult | None:
        """Wait until no computation is in flight and return the latest result."""
        while self.busy:
            await asyncio.wait({self._task})  # type: ignore[arg-type]
        return self._latest

    async def run_latest(self, request: AnalysisRequest) -> AnalysisResult | None:
        """Submit *request* and wait for it; None if a newer request superseded it.

        If the computation fails while still current, its exception is raised.
        """
        generation = self.submit(request)
        result = await self.wait()
        if result is not None and result.generation == generation:
            return result
        if generation == self._generation and self.last_error is not None:
            raise self.last_error
        return None

    async def close(self) -> None:
        """Cancel any in-flight computation."""
        self._generation += 1
        if self.busy:
            task = self._task
            task.cancel()  # type: ignore[union-attr]
            await asyncio.wait({task})  # type: ignore[arg-type]
