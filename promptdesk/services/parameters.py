"""
PARAMETER STORE MODULE
======================

Holds the single active ParameterSet. There is exactly one copy of each value
(no slider/input/persisted triplets to keep in sync); anything that needs to
react to a change subscribes a listener. The application subscribes the
persistence adapter so every change is written to parameters.json.

Setters never raise: non-numeric input becomes 0, then the value is clamped
into its range by ParameterSet itself.
"""

import logging
from typing import Any, Callable, List, Optional

from promptdesk.models import ParameterSet, PARAMETER_RANGES, coerce_number

logger = logging.getLogger("PromptDesk")

ParameterListener = Callable[[ParameterSet], None]


class ParameterStore:
    """Single source of truth for the generation parameters, with publish-on-change."""

    def __init__(self, initial: Optional[ParameterSet] = None):
        self._current = initial or ParameterSet()
        self._listeners: List[ParameterListener] = []

    def get(self) -> ParameterSet:
        """Return the current (immutable) parameter snapshot."""
        return self._current

    def subscribe(self, listener: ParameterListener) -> None:
        self._listeners.append(listener)

    # --------------------------------------------------------------------------
    # SETTERS
    # --------------------------------------------------------------------------

    def set_temperature(self, value: Any) -> ParameterSet:
        return self.update(temperature=value)

    def set_max_length(self, value: Any) -> ParameterSet:
        return self.update(max_length=value)

    def set_top_p(self, value: Any) -> ParameterSet:
        return self.update(top_p=value)

    def set_frequency_penalty(self, value: Any) -> ParameterSet:
        return self.update(frequency_penalty=value)

    def set_presence_penalty(self, value: Any) -> ParameterSet:
        return self.update(presence_penalty=value)

    def update(self, **fields: Any) -> ParameterSet:
        """
        Set any subset of fields at once (snake_case names). Unknown names raise
        TypeError since that is a programming error, not user input.
        """
        unknown = set(fields) - set(PARAMETER_RANGES)
        if unknown:
            raise TypeError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")

        values = self._current.model_dump()
        values.update(fields)
        # Constructing (not model_copy) so the clamping validators run.
        updated = ParameterSet(**values)
        if updated != self._current:
            self._current = updated
            self._publish()
        return self._current

    def adjust(self, field: str, delta: Any) -> ParameterSet:
        """Step one field by delta (the +/- buttons of the console), clamped."""
        if field not in PARAMETER_RANGES:
            raise TypeError(f"Unknown parameter: {field}")
        current = getattr(self._current, field)
        return self.update(**{field: current + coerce_number(delta)})

    def _publish(self) -> None:
        logger.debug("Parameters changed: %s", self._current.model_dump(by_alias=True))
        for listener in list(self._listeners):
            listener(self._current)
