"""Command-line tools for Concert Companion.

- ``python -m src.cli.concerts init-db`` -- create the SQLite schema.
- ``python -m src.cli.concerts lookup <spotifyId>`` -- run the concert
  aggregation for a stored user and print the JSON result.
"""
