"""Validity checks for detected touch contacts."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence, TypeVar


class _Contact(Protocol):
    index: Optional[int]
    size: Sequence[float]
    stable: Optional[bool]
    valid: Optional[bool]


C = TypeVar("C", bound=_Contact)


@dataclass
class ValidationConfig:
    """Options for the contact validation phase."""

    # Once a contact is invalid it stays invalid until it is lifted.
    track_validity: bool = True

    # Limits that the aspect ratio of a valid contact must stay within.
    aspect_limits: Optional[tuple[float, float]] = None

    # Limits that the major axis of a valid contact must stay within.
    size_limits: Optional[tuple[float, float]] = None


def find_in_frame(index: int, frame: Iterable[C]) -> Optional[C]:
    """Return the first contact of ``frame`` with the given index, if any."""
    return next((c for c in frame if c.index == index), None)


class Validator:
    """Marks contacts of successive frames as valid or invalid."""

    def __init__(self, config: Optional[ValidationConfig] = None) -> None:
        self.config = config if config is not None else ValidationConfig()
        self._last: list = []

    def reset(self) -> None:
        """Forget the previous frame."""
        self._last.clear()

    def validate(self, frame: Sequence[C]) -> None:
        """Set ``valid`` on every contact of the frame and remember the frame."""
        for contact in frame:
            contact.valid = self._check_contact(contact)

        self._last = [copy.copy(contact) for contact in frame]

    def _check_contact(self, contact: _Contact) -> bool:
        # Unstable contacts are never invalidated.
        if contact.stable is not None and not contact.stable:
            return True

        if self.config.track_validity and not self._check_temporal(contact):
            return False

        if self.config.size_limits is not None and not self._check_size(contact):
            return False

        if self.config.aspect_limits is not None and not self._check_aspect(contact):
            return False

        return True

    def _check_temporal(self, contact: _Contact) -> bool:
        if contact.index is None:
            return True

        last = find_in_frame(contact.index, self._last)
        if last is None or last.valid is None:
            return True

        return bool(last.valid)

    def _check_size(self, contact: _Contact) -> bool:
        limits = self.config.size_limits
        if limits is None:
            return True

        major = max(contact.size)
        return min(limits) <= major <= max(limits)

    def _check_aspect(self, contact: _Contact) -> bool:
        limits = self.config.aspect_limits
        if limits is None:
            return True

        major = max(contact.size)
        minor = min(contact.size)

        if minor == 0:
            aspect = math.inf if major > 0 else math.nan
        else:
            aspect = major / minor

        return min(limits) <= aspect <= max(limits)