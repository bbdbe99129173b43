"""Deterministic data decoders — Pub/Sub push envelopes."""

from src.decoders.pubsub import decode_envelope

__all__ = ["decode_envelope"]
