"""Time-windowed arenas: windows, rewards, ranking and settlement."""
