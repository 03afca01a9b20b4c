"""Gateway core — connection resolution and query translation."""
