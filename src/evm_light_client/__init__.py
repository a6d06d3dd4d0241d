"""Sync and verification engine for an EVM-compatible beacon chain light client."""
