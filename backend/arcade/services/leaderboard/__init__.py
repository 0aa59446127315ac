"""Leaderboard domain services: validation, admission control, storage.

HTTP routes and socket handlers import from here, keeping transport
concerns separated from ranking and plausibility rules.
"""
