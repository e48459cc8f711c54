"""Application layer: ports and use cases for the rolling logging core."""
