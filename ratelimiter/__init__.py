"""
Multi-tenant fixed-window rate limiter.

Rules live in PostgreSQL, window counters in Redis; see DESIGN.md.
"""

