"""
Prefix autocomplete over a catalog of package names.

This package is split into:
* An index builder that periodically streams the catalog snapshot and stores
  every name under each of its prefixes.
* A query service answering `GET /v1/<prefix>` from that index.
"""

__version__ = "0.1.0"
