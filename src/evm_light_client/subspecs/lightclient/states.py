"""Outcomes of submitting an update to the light client store."""

from __future__ import annotations

from enum import Enum, auto


class UpdateOutcome(Enum):
    """
    How the store changed after an update was accepted.

    Rejection is not an outcome: a rejected update raises an `UpdateError`
    (`Stale` when it merely carries nothing new) and leaves the store as it
    was.

    Transitions
    -----------
    ::

        store --(accepted, newer attested header)--> ADVANCED_OPTIMISTIC
        store --(accepted, newer finalized header)--> ADVANCED_FINALIZED
        store --(nothing to apply)------------------> ACCEPTED_NO_CHANGE
    """

    ACCEPTED_NO_CHANGE = auto()
    """
    Nothing moved.

    Returned by a force update when no pending update exists or the timeout
    has not elapsed.
    """

    ADVANCED_OPTIMISTIC = auto()
    """The optimistic header moved forward; finality is unchanged."""

    ADVANCED_FINALIZED = auto()
    """
    The finalized header moved forward.

    The optimistic header may have moved too, and the committees rotate when
    finality enters a new sync committee period.
    """
