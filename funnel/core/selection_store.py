# funnel/core/selection_store.py
"""Accumulator for the options toggled on the active multi-select step."""

from typing import FrozenSet, Iterable, List
import logging

from funnel.core.exceptions import validation_error
from funnel.models.session_state import FunnelState

logger = logging.getLogger(__name__)


class SelectionStore:
    """
    Toggle set of option labels, kept on the owning FunnelState.

    Membership is by exact label text. The store knows nothing about steps;
    the engine decides when a toggle is allowed and when to clear.
    """

    def __init__(self, state: FunnelState):
        self._state = state

    def toggle(self, label: str) -> bool:
        """
        Flip membership of `label`.

        Returns:
            True if the label is selected after the call
        """
        if not label or not label.strip():
            raise validation_error("Option label must not be empty", field="label", value=label)

        selected = self._state.selected_options
        if label in selected:
            selected.discard(label)
            logger.debug(f"Deselected option: {label}")
            return False

        selected.add(label)
        logger.debug(f"Selected option: {label}")
        return True

    def clear(self) -> None:
        if self._state.selected_options:
            logger.debug(f"Clearing {len(self._state.selected_options)} selected options")
        self._state.selected_options.clear()

    def snapshot(self) -> FrozenSet[str]:
        return frozenset(self._state.selected_options)

    def ordered(self, options: Iterable[str]) -> List[str]:
        """Selected labels in the order the step lists its options"""
        return [option for option in options if option in self._state.selected_options]

    def __contains__(self, label: str) -> bool:
        return label in self._state.selected_options

    def __len__(self) -> int:
        return len(self._state.selected_options)
