"""Application layer: caching of derived artifacts."""
