# tests/core/conftest.py
"""
Shared fixtures for funnel core component tests.

Provides a manual clock implementing the Scheduler interface, deterministic
timer settings, and engines/orchestrators wired to them.
"""

import pytest
from unittest.mock import Mock
from typing import Callable, List, Optional

from funnel.models.flow_models import FunnelStep
from funnel.models.session_state import FunnelState
from funnel.core import step_registry
from funnel.core.config import Settings
from funnel.core.funnel_engine import FunnelEngine
from funnel.core.orchestrator import FunnelOrchestrator
from funnel.core.scheduler import Scheduler


class ManualTimer:
    """Timer registered on the manual clock"""

    def __init__(self, seq: int, due: float, period: Optional[float], callback: Callable[[], None]):
        self.seq = seq
        self.due = due
        self.period = period
        self.callback = callback
        self.cancelled = False
        self.fired = 0

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler whose time only moves when the test calls advance()"""

    def __init__(self):
        self.now = 0.0
        self.timers: List[ManualTimer] = []
        self._seq = 0

    def _add(self, due: float, period: Optional[float], callback) -> ManualTimer:
        self._seq += 1
        timer = ManualTimer(self._seq, due, period, callback)
        self.timers.append(timer)
        return timer

    def call_every(self, period: float, callback) -> ManualTimer:
        return self._add(self.now + period, period, callback)

    def call_later(self, delay: float, callback) -> ManualTimer:
        return self._add(self.now + delay, None, callback)

    @property
    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in time order"""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            timer.fired += 1
            if timer.period is None:
                timer.cancelled = True
            else:
                timer.due += timer.period
            timer.callback()
        self.now = target


@pytest.fixture
def manual_scheduler():
    """Deterministic clock for loading sequence tests"""
    return ManualScheduler()


@pytest.fixture
def timing_settings():
    """Whole-second periods so manual clock arithmetic stays exact"""
    return Settings(
        PROGRESS_TICK_SECONDS=1.0,
        MESSAGE_ROTATE_SECONDS=7.0,
        TESTIMONIAL_ROTATE_SECONDS=11.0,
        HANDOFF_DELAY_SECONDS=5.0,
    )


@pytest.fixture
def scroll_mock():
    return Mock()


@pytest.fixture
def engine(manual_scheduler, timing_settings, scroll_mock):
    """FunnelEngine on the manual clock"""
    engine = FunnelEngine(
        state=FunnelState(session_id="test-session-123"),
        scheduler=manual_scheduler,
        settings=timing_settings,
        scroll_to_top=scroll_mock,
    )
    yield engine
    engine.close()


@pytest.fixture
def orchestrator(engine):
    return FunnelOrchestrator(engine=engine)


# Test utilities
class TestUtils:
    """Utility functions for core component testing"""

    @staticmethod
    def walk_to(engine: FunnelEngine, target: FunnelStep) -> None:
        """Advance along the configured edges until `target` is current"""
        while engine.current_step != target:
            next_step = step_registry.next_step_for(engine.current_step)
            assert next_step is not None, f"{target.value} not reachable"
            engine.advance(next_step)


@pytest.fixture
def test_utils():
    """Provide test utility functions"""
    return TestUtils


def pytest_configure(config):
    """Configure custom pytest markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no event loop)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (real asyncio timers)"
    )
    config.addinivalue_line(
        "markers", "flow: marks tests as full funnel walk-throughs"
    )
