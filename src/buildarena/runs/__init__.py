"""Procedural runs: seeded drafts, combat loop and build snapshots."""
