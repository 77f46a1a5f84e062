"""Update session states and the transitions allowed between them."""

from __future__ import annotations

from enum import Enum


class UpdateSessionState(str, Enum):
    NONE = "none"
    DOWNLOADING = "downloading"
    READY = "ready"


class InvalidTransition(ValueError):
    """Raised when a state change skips or reverses a step of the cycle."""


_ALLOWED = {
    (UpdateSessionState.NONE, UpdateSessionState.DOWNLOADING),
    (UpdateSessionState.DOWNLOADING, UpdateSessionState.READY),
}


def transition(current: UpdateSessionState, target: UpdateSessionState) -> UpdateSessionState:
    """Return ``target`` if moving there from ``current`` is allowed.

    Any state may fall back to ``NONE``; otherwise the cycle only advances
    ``NONE -> DOWNLOADING -> READY``.
    """

    if target is UpdateSessionState.NONE or (current, target) in _ALLOWED:
        return target
    raise InvalidTransition(f"Cannot move update state from {current.value} to {target.value}")


__all__ = ["InvalidTransition", "UpdateSessionState", "transition"]
