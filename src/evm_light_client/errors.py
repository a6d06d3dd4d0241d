"""
Error taxonomy of the light client engine.

Every failure an operation can report is a `LightClientError`. The four
families mirror the operations that raise them:

- `InitError`: installing a store from a bootstrap failed.
- `UpdateError`: an update was rejected or could not be obtained.
- `FetchError`: a header or block could not be served with full trust.
- `PersistError`: the store could not be written or read back.

Two class attributes tell the caller what to do with a failure:

- `retryable`: the same call may succeed later (upstream or IO trouble).
  Proof and signature failures are never retryable: the same bad update
  always fails.
- `security_relevant`: the failure may indicate an attack or tampering and
  must be logged loudly, never swallowed.

`Stale` is neither: it is the normal "no new information" outcome of a
periodic sync.
"""

from __future__ import annotations

from typing import ClassVar


class LightClientError(Exception):
    """Base class for all light client failures."""

    retryable: ClassVar[bool] = False
    """Whether retrying the same call may succeed."""

    security_relevant: ClassVar[bool] = False
    """Whether the failure may indicate tampering."""


class InitError(LightClientError):
    """Raised when a store cannot be initialized."""


class UpdateError(LightClientError):
    """Raised when an update is rejected or cannot be obtained."""


class FetchError(LightClientError):
    """Raised when a header or block cannot be served with full trust."""


class PersistError(LightClientError):
    """Raised when the store cannot be persisted or restored."""


# Initialization


class InvalidBootstrap(InitError):
    """The bootstrap committee is not proven by the bootstrap header, or the header is not the trusted one."""

    security_relevant = True


class NotInitialized(InitError, UpdateError, FetchError, PersistError):
    """An operation needed a store but none was initialized or restored."""


# Updates


class InvalidFinalityProof(UpdateError):
    """The finalized header is not proven by the attested header's state root."""

    security_relevant = True


class InvalidCommitteeProof(UpdateError):
    """The next sync committee is not proven by the attested header's state root."""

    security_relevant = True


class InvalidSignature(UpdateError):
    """The aggregate signature does not verify against the participating keys."""

    security_relevant = True


class InsufficientParticipation(UpdateError):
    """Fewer committee members signed than the configured threshold requires."""

    security_relevant = True


class MissingCommitteeForPeriod(UpdateError):
    """The committee needed to verify the update is not known to the store."""


class MalformedUpdate(UpdateError):
    """The update is internally inconsistent (slot ordering, shapes, payload format)."""

    security_relevant = True


class UnknownFork(UpdateError):
    """The epoch predates the earliest fork in the configured schedule."""


class InvalidSlot(UpdateError, FetchError):
    """Slot arithmetic overflowed the 64-bit range of the chain parameters."""


class Stale(UpdateError):
    """The update carries no new information; the store is unchanged."""


class UpstreamUnavailable(UpdateError, FetchError):
    """The upstream source failed or timed out."""

    retryable = True


# Fetches


class UnverifiedSlot(FetchError):
    """The requested slot is not covered by the finalized header, or its data failed authentication."""


class NotCached(FetchError):
    """Nothing trusted is available to serve or authenticate the requested slot."""


# Persistence


class CorruptPersistedState(PersistError):
    """The persisted record failed decoding, checksum, or committee re-validation."""

    security_relevant = True


class IOFailure(PersistError):
    """The key/value provider failed to read or write."""

    retryable = True
