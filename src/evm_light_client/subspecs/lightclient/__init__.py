"""The light client store and the rules by which it advances."""

from .bootstrap import initialize_light_client_store
from .states import UpdateOutcome
from .store import (
    CommitteeProof,
    LightClientStore,
    OptionalCommitteeProof,
    OptionalLightClientUpdate,
    OptionalSyncCommittee,
)
from .transition import (
    apply_light_client_update,
    force_update,
    is_better_update,
    process_light_client_update,
)
from .validation import (
    UpdateDecision,
    validate_light_client_update,
    verify_update_proofs_and_signature,
)

__all__ = [
    "CommitteeProof",
    "LightClientStore",
    "OptionalCommitteeProof",
    "OptionalLightClientUpdate",
    "OptionalSyncCommittee",
    "UpdateDecision",
    "UpdateOutcome",
    "apply_light_client_update",
    "force_update",
    "initialize_light_client_store",
    "is_better_update",
    "process_light_client_update",
    "validate_light_client_update",
    "verify_update_proofs_and_signature",
]
