"""scopegate — Version-adaptive gateway for querying Elasticsearch clusters."""

__version__ = "0.1.0"
