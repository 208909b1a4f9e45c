"""HTTP API for the NDIS invoice engine."""
