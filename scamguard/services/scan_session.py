"""
Scan session: the state machine behind one browser's analysis page.

    idle --scan--> loading --ok--> result
                           \\-fail-> error
    any  --reset--> idle   (clears text, url and image)

A scan only starts when the active mode has input and nothing is in flight.
Each started scan carries a ticket; reset() invalidates outstanding tickets so
a result arriving after a reset is dropped instead of resurrecting the page.
The request itself still holds the session's single in-flight slot until it
settles, so a scan triggered right after a reset is ignored until then.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from ..models.analysis import AnalysisResult, AnalysisState, InputMode
from .analysis_client import GENERIC_FAILURE_MESSAGE, AnalysisFailed

logger = logging.getLogger(__name__)


class ScanPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESULT = "result"
    ERROR = "error"


class Analyzer(Protocol):
    async def analyze(self, input: str, mode: InputMode) -> AnalysisResult: ...


@dataclass(frozen=True)
class ScanTicket:
    generation: int
    mode: InputMode
    input: str


class ScanSession:
    def __init__(self, session_id: Optional[str] = None) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.mode = InputMode.TEXT
        self.text_input = ""
        self.url_input = ""
        self.image_data: Optional[str] = None
        self.state = AnalysisState()
        self.request_count = 0
        self._generation = 0
        self._in_flight: Optional[ScanTicket] = None

    @property
    def phase(self) -> ScanPhase:
        if self.state.loading:
            return ScanPhase.LOADING
        if self.state.result is not None:
            return ScanPhase.RESULT
        if self.state.error is not None:
            return ScanPhase.ERROR
        return ScanPhase.IDLE

    def active_input(self) -> Optional[str]:
        """Input for the active mode, or None when the mode has nothing to scan."""
        if self.mode is InputMode.TEXT:
            return self.text_input if self.text_input.strip() else None
        if self.mode is InputMode.LINK:
            return self.url_input if self.url_input.strip() else None
        return self.image_data or None

    def can_scan(self) -> bool:
        return self._in_flight is None and self.active_input() is not None

    def set_mode(self, mode: InputMode) -> None:
        self.mode = mode

    def clear_image(self) -> None:
        self.image_data = None

    # -- transitions --------------------------------------------------------

    def begin_scan(self) -> Optional[ScanTicket]:
        if not self.can_scan():
            reason = "a request is already in flight" if self._in_flight else f"no {self.mode.value} input"
            logger.debug("Session %s: scan ignored, %s.", self.session_id, reason)
            return None

        self.state = AnalysisState(loading=True)
        self.request_count += 1
        self._in_flight = ScanTicket(generation=self._generation, mode=self.mode, input=self.active_input())
        return self._in_flight

    def complete(self, ticket: ScanTicket, result: AnalysisResult) -> bool:
        self._settle(ticket)
        if not self._is_current(ticket):
            return False
        self.state = AnalysisState(result=result)
        return True

    def fail(self, ticket: ScanTicket, message: str) -> bool:
        self._settle(ticket)
        if not self._is_current(ticket):
            return False
        self.state = AnalysisState(error=message)
        return True

    def reset(self) -> None:
        # The outstanding request keeps its slot until it settles.
        self._generation += 1
        self.text_input = ""
        self.url_input = ""
        self.image_data = None
        self.state = AnalysisState()

    def _settle(self, ticket: ScanTicket) -> None:
        if self._in_flight is ticket:
            self._in_flight = None

    def _is_current(self, ticket: ScanTicket) -> bool:
        if ticket.generation != self._generation or not self.state.loading:
            logger.info("Session %s: dropping stale %s scan outcome.", self.session_id, ticket.mode.value)
            return False
        return True

    # -- orchestration ------------------------------------------------------

    async def run(self, ticket: ScanTicket, analyzer: Analyzer) -> None:
        try:
            result = await analyzer.analyze(ticket.input, ticket.mode)
        except AnalysisFailed as exc:
            self.fail(ticket, str(exc))
        except Exception:
            logger.exception("Session %s: analyzer raised unexpectedly.", self.session_id)
            self.fail(ticket, GENERIC_FAILURE_MESSAGE)
        else:
            self.complete(ticket, result)
        finally:
            self._settle(ticket)

    async def scan(self, analyzer: Analyzer) -> Optional[ScanTicket]:
        ticket = self.begin_scan()
        if ticket is not None:
            await self.run(ticket, analyzer)
        return ticket
