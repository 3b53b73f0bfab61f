"""Deterministic dinner planning engine."""
