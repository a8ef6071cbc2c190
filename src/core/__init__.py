"""Core domain package for cookie-janitor.

Core contains rule classification and reconciliation logic without any
SQLite, CSV or platform-specific code, keeping the business logic portable.
"""
