"""
Application layer - role assignment, role registry and permission evaluation.
"""
