"""Data models shared by the gateway core, the API, and the CLI."""
