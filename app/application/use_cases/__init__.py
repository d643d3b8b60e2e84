"""Application use cases, one service per area."""
