"""Exception types for docprobe.

Structural problems are reported as findings, never raised. These exceptions
cover the two places where control flow has to stop: type resolution inside the
registry (turned into a finding by the validator) and configuration errors that
must prevent a sweep from starting.
"""

from typing import Literal


class TypeResolutionError(Exception):
    """A resource type or one of its base types cannot be resolved."""

    def __init__(self, code: Literal["UNRESOLVED_TYPE", "CYCLIC_TYPE"], type_name: str, message: str):
        super().__init__(message)
        self.code = code
        self.type_name = type_name
        self.message = message


class ConfigurationError(Exception):
    """Fatal configuration problem detected before any unit of work runs."""


class SelectionError(ConfigurationError):
    """An explicit method or file selector matched nothing."""
