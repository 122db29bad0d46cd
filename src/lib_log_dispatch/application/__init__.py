"""Application layer: ports and the broadcast channel."""
