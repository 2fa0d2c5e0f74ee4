"""Database tables, queries, and report calculations."""
