"""Scoped role-based access control for multi-location project management."""
