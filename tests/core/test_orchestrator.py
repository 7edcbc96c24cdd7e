# tests/core/test_orchestrator.py
"""
Tests for FunnelOrchestrator - the presentation-facing interface.

Includes the complete funnel walk-through on the manual clock and a run of
the loading sequence on real asyncio timers.
"""

import asyncio
import logging
import pytest
from unittest.mock import Mock

from funnel.models.flow_models import FunnelStep, StepCategory, StepView
from funnel.core import step_registry
from funnel.core.config import Settings
from funnel.core.exceptions import FunnelTransitionError
from funnel.core.orchestrator import FunnelOrchestrator
from funnel.core.scheduler import AsyncioScheduler


@pytest.mark.unit
class TestReadAccessors:

    def test_initial_accessors(self, orchestrator):
        assert orchestrator.current_step() == FunnelStep.INTRO
        assert orchestrator.selection_snapshot() == frozenset()
        assert orchestrator.loading_progress() == 0
        assert orchestrator.current_message_index() == 0
        assert orchestrator.current_testimonial_index() == 0

    def test_scroll_hook_passed_to_existing_engine(self, engine):
        scroll = Mock()
        orchestrator = FunnelOrchestrator(engine=engine, scroll_to_top=scroll)

        orchestrator.continue_()

        scroll.assert_called_once()

    def test_session_info(self, orchestrator, test_utils):
        test_utils.walk_to(orchestrator.engine, FunnelStep.Q4)
        options = step_registry.options_for(FunnelStep.Q4)
        orchestrator.toggle_option(options[3])
        orchestrator.toggle_option(options[1])

        info = orchestrator.get_session_info()

        assert info["session_id"] == "test-session-123"
        assert info["current_step"] == "q4"
        assert info["selected_options"] == [options[1], options[3]]
        assert info["valid_actions"] == ["continue"]
        assert info["history"][-1] == "q4"

    def test_flow_debug_info(self, orchestrator):
        info = orchestrator.get_flow_debug_info()

        assert info["issues"] == []
        assert info["total_states"] == 16


@pytest.mark.unit
class TestRenderView:

    def test_informational_view(self, orchestrator):
        view = orchestrator.render_view()

        assert isinstance(view, StepView)
        assert view.step == FunnelStep.INTRO
        assert view.category == StepCategory.INFORMATIONAL
        assert view.options == []
        assert view.progress_percent is None
        assert view.loading_progress is None

    def test_single_choice_view(self, orchestrator, test_utils):
        test_utils.walk_to(orchestrator.engine, FunnelStep.Q2)

        view = orchestrator.render_view()

        assert view.progress_percent == 30
        assert [o.label for o in view.options] == step_registry.options_for(FunnelStep.Q2)
        assert not any(o.selected for o in view.options)

    def test_multi_select_view_marks_selection(self, orchestrator, test_utils):
        test_utils.walk_to(orchestrator.engine, FunnelStep.Q5)
        options = step_registry.options_for(FunnelStep.Q5)
        orchestrator.toggle_option(options[2])

        view = orchestrator.render_view()

        assert [o.label for o in view.options] == options
        assert [o.selected for o in view.options] == [False, False, True, False, False]

    def test_loading_view(self, orchestrator, manual_scheduler, test_utils):
        test_utils.walk_to(orchestrator.engine, FunnelStep.LOADING)
        manual_scheduler.advance(22)

        view = orchestrator.render_view()

        assert view.loading_progress == 22
        assert view.loading_message == step_registry.loading_messages()[3]
        assert view.testimonial == step_registry.loading_testimonials()[2]

    def test_terminal_view(self, orchestrator, test_utils):
        test_utils.walk_to(orchestrator.engine, FunnelStep.SALES_PAGE)

        view = orchestrator.render_view()

        assert view.category == StepCategory.TERMINAL_DISPLAY
        assert view.title


@pytest.mark.flow
class TestCompleteFunnel:
    """End-to-end walk-through on the manual clock"""

    def test_full_funnel(self, orchestrator, manual_scheduler, scroll_mock):
        # Informational and single-choice steps up to the desired outcomes question
        orchestrator.continue_()                                   # intro -> bio
        orchestrator.continue_()                                   # bio -> q1
        orchestrator.choose(step_registry.options_for(FunnelStep.Q1)[2])
        orchestrator.choose(step_registry.options_for(FunnelStep.Q2)[0])
        orchestrator.choose(step_registry.options_for(FunnelStep.Q3)[1])
        assert orchestrator.current_step() == FunnelStep.Q4

        q4_options = step_registry.options_for(FunnelStep.Q4)
        orchestrator.toggle_option(q4_options[0])
        orchestrator.toggle_option(q4_options[4])
        assert orchestrator.selection_snapshot() == frozenset({q4_options[0], q4_options[4]})
        orchestrator.advance(FunnelStep.TESTIMONIALS_PRE)

        for step in (FunnelStep.AGITATION, FunnelStep.TRANSFORMATION, FunnelStep.BENEFITS, FunnelStep.Q5):
            orchestrator.advance(step)
        assert orchestrator.selection_snapshot() == frozenset()

        orchestrator.advance(FunnelStep.Q6)
        orchestrator.choose(step_registry.options_for(FunnelStep.Q6)[0])
        orchestrator.advance(FunnelStep.FINAL_ASK)

        orchestrator.decline()
        assert orchestrator.current_step() == FunnelStep.FINAL_ASK

        orchestrator.advance(FunnelStep.LOADING)
        assert orchestrator.loading_progress() == 0

        manual_scheduler.advance(100)
        assert orchestrator.loading_progress() == 100
        assert orchestrator.current_step() == FunnelStep.LOADING

        manual_scheduler.advance(5)
        assert orchestrator.current_step() == FunnelStep.SALES_PAGE
        assert scroll_mock.call_count == 15

        with pytest.raises(FunnelTransitionError):
            orchestrator.continue_()
        assert orchestrator.current_step() == FunnelStep.SALES_PAGE


@pytest.mark.integration
class TestAsyncioLoading:
    """Loading sequence on the real event loop"""

    @pytest.fixture
    def fast_settings(self):
        return Settings(
            PROGRESS_TICK_SECONDS=0.001,
            MESSAGE_ROTATE_SECONDS=0.002,
            TESTIMONIAL_ROTATE_SECONDS=0.003,
            HANDOFF_DELAY_SECONDS=0.01,
        )

    @pytest.mark.asyncio
    async def test_loading_reaches_sales_page(self, fast_settings, test_utils):
        orchestrator = FunnelOrchestrator(scheduler=AsyncioScheduler(), settings=fast_settings)
        test_utils.walk_to(orchestrator.engine, FunnelStep.LOADING)

        await orchestrator.wait_for_step(FunnelStep.SALES_PAGE, timeout=10)

        assert orchestrator.loading_progress() == 100
        assert not orchestrator.engine.sequencer.running

        frozen = (orchestrator.current_message_index(), orchestrator.current_testimonial_index())
        await asyncio.sleep(0.05)
        assert (orchestrator.current_message_index(), orchestrator.current_testimonial_index()) == frozen

    @pytest.mark.asyncio
    async def test_close_stops_asyncio_timers(self, fast_settings, test_utils):
        orchestrator = FunnelOrchestrator(scheduler=AsyncioScheduler(), settings=fast_settings)
        test_utils.walk_to(orchestrator.engine, FunnelStep.LOADING)
        await asyncio.sleep(0.02)

        orchestrator.close()
        progress = orchestrator.loading_progress()
        await asyncio.sleep(0.05)

        assert orchestrator.loading_progress() == progress
        assert orchestrator.current_step() == FunnelStep.LOADING

    @pytest.mark.asyncio
    async def test_wait_for_current_step_returns_immediately(self, orchestrator):
        assert await orchestrator.wait_for_step(FunnelStep.INTRO) == FunnelStep.INTRO

    @pytest.mark.asyncio
    async def test_wait_for_step_times_out(self, orchestrator):
        with pytest.raises(asyncio.TimeoutError):
            await orchestrator.wait_for_step(FunnelStep.SALES_PAGE, timeout=0.01)

        assert orchestrator.engine._listeners == []

    @pytest.mark.asyncio
    async def test_asyncio_scheduler_primitives(self):
        scheduler = AsyncioScheduler()
        ticks = []
        fired = []

        handle = scheduler.call_every(0.001, lambda: ticks.append(1))
        scheduler.call_later(0.005, lambda: fired.append(1))
        await asyncio.sleep(0.05)
        handle.cancel()
        count = len(ticks)
        await asyncio.sleep(0.02)

        assert count > 0
        assert len(ticks) == count
        assert fired == [1]

    @pytest.mark.asyncio
    async def test_failing_periodic_callback_is_logged(self, caplog):
        scheduler = AsyncioScheduler()

        def explode():
            raise ValueError("tick failed")

        with caplog.at_level(logging.ERROR, logger="funnel.core.scheduler"):
            handle = scheduler.call_every(0.001, explode)
            await asyncio.sleep(0.02)

        assert handle.done()
        assert not handle.cancelled()
        assert any("tick failed" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_cancelled_periodic_timer_is_not_logged(self, caplog):
        scheduler = AsyncioScheduler()

        with caplog.at_level(logging.ERROR, logger="funnel.core.scheduler"):
            handle = scheduler.call_every(0.001, lambda: None)
            await asyncio.sleep(0.005)
            handle.cancel()
            await asyncio.sleep(0.005)

        assert handle.cancelled()
        assert not any("Repeating timer" in record.getMessage() for record in caplog.records)
