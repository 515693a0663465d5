"""AI Design Studio backend: prompt to three rendered design concepts."""
