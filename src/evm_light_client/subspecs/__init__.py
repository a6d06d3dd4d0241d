"""Subspecifications of the light client: SSZ, chain arithmetic, signing, sync and storage."""
