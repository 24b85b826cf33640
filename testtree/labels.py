"""Active-state, label and tooltip derivation for tree nodes."""

from __future__ import annotations

from .definitions import Definition, DefinitionState
from .nodes import ActiveState

UNMAPPED_MARKER = "❔ "
FOCUSED_MARKER = "⚡ "
FOCUSED_IN_MARKER = "🔸 "
DISABLED_MARKER = "💤 "
DISABLED_OUT_MARKER = "🔹 "


def active_state_for(definition: Definition | None, existing: ActiveState | None = None) -> ActiveState:
    """Map a definition's directive state onto a node active state."""
    if definition is not None:
        if definition.state is DefinitionState.FOCUSED:
            return ActiveState.FOCUSED
        if definition.state is DefinitionState.DISABLED:
            return ActiveState.DISABLED
        if definition.disabled:
            return ActiveState.DISABLED_OUT
    return existing or ActiveState.DEFAULT


def tooltip_for(full_name: str, active_state: ActiveState | None = None) -> str:
    if active_state in (ActiveState.FOCUSED, ActiveState.FOCUSED_IN):
        return f"{full_name} (Focused)"
    if active_state in (ActiveState.DISABLED, ActiveState.DISABLED_OUT):
        return f"{full_name} (Disabled)"
    return full_name


class NodeLabeler:
    """Builds display labels, optionally prefixed with directive indicators."""

    def __init__(self, show_indicators: bool = True) -> None:
        self.show_indicators = show_indicators

    def label_for(
        self,
        name: str,
        definition: Definition | DefinitionState | None = None,
        active_state: ActiveState | None = None,
    ) -> str:
        """Return ``name`` prefixed with the marker for its state.

        A missing definition means the node has no known source and always
        gets the unmapped marker.
        """
        if definition is None:
            return f"{UNMAPPED_MARKER}{name}"
        if not self.show_indicators:
            return name

        if isinstance(definition, DefinitionState):
            state = definition
            inherited_disabled = False
        else:
            state = definition.state
            inherited_disabled = definition.disabled

        if state is DefinitionState.FOCUSED:
            marker = FOCUSED_MARKER
        elif state is DefinitionState.DISABLED:
            marker = DISABLED_MARKER
        elif inherited_disabled:
            marker = DISABLED_OUT_MARKER
        elif active_state is ActiveState.FOCUSED:
            marker = FOCUSED_MARKER
        elif active_state is ActiveState.FOCUSED_IN:
            marker = FOCUSED_IN_MARKER
        elif active_state is ActiveState.DISABLED:
            marker = DISABLED_MARKER
        elif active_state is ActiveState.DISABLED_OUT:
            marker = DISABLED_OUT_MARKER
        else:
            marker = ""
        return f"{marker}{name}"

    def plain_label(self, name: str) -> str:
        """Label for synthetic nodes that have no source definition."""
        return self.label_for(name, DefinitionState.DEFAULT)
