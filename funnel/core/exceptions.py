# funnel/core/exceptions.py
"""
Funnel Core Exceptions - standardized error handling for the funnel state machine.

The funnel has no recoverable error states. Everything defined here marks a
programming or configuration defect: an advance to a step that is not the
configured next one, a toggle outside a multi-select step, bad timer settings.
"""

from typing import Optional, Dict, Any


class FunnelBaseException(Exception):
    """Base exception for all funnel errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize funnel base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class FunnelTransitionError(FunnelBaseException):
    """Advance requested to a step that is not reachable from the current one"""

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        target_state: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize transition error.

        Args:
            message: Error description
            current_state: State where the advance was attempted
            target_state: Requested destination
            details: Additional error context
        """
        super().__init__(message, details)
        self.current_state = current_state
        self.target_state = target_state

        if current_state:
            self.details['current_state'] = current_state
        if target_state:
            self.details['target_state'] = target_state

    def __str__(self) -> str:
        """String representation including state context"""
        base_msg = super().__str__()
        if self.current_state:
            return f"{base_msg} [State: {self.current_state}]"
        return base_msg


class FunnelValidationError(FunnelBaseException):
    """Errors in option toggling and input integrity"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize validation error.

        Args:
            message: Error description
            field: Field that failed validation
            value: Invalid value
            details: Additional validation context
        """
        super().__init__(message, details)
        self.field = field
        self.value = value

        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = str(value)


class FunnelConfigurationError(FunnelBaseException):
    """Errors in settings, timers and the step catalog"""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.component = component

        if component:
            self.details['component'] = component


# Convenience functions for creating common errors

def transition_error(message: str, current_state: str, target_state: str = None) -> FunnelTransitionError:
    """Create a transition error with state context."""
    return FunnelTransitionError(message, current_state=current_state, target_state=target_state)


def validation_error(message: str, field: str, value: Any = None) -> FunnelValidationError:
    """Create a validation error with field context."""
    return FunnelValidationError(message, field=field, value=value)


def config_error(message: str, component: str) -> FunnelConfigurationError:
    """Create a configuration error with component context."""
    return FunnelConfigurationError(message, component=component)
