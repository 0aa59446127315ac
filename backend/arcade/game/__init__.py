"""Client-side game: simulation engine, scheduling and session control.

Nothing here imports Flask; the only network dependency is the httpx
client used to report a finished game.
"""
