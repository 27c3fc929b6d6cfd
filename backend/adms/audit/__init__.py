"""Audit trail: activity catalog, recorder and history queries."""
