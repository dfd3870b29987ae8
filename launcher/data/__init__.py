"""
Persisted launcher state.

This package is responsible for:
* Determining the data directory (via env var + sensible default).
* Loading and persisting launcher settings.
* Reading YAML release manifests into release descriptors.
"""
