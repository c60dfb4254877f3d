"""Relational storage for the pool (SQLModel)."""
