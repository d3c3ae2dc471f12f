"""
Gateway admin service: management API for backend and route configuration
with an append-only change history.
"""
