"""Application layer: ports, requests and use cases."""
