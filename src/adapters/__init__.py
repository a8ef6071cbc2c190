"""Adapters binding the core ports to CSV files, SQLite and the local platform."""
