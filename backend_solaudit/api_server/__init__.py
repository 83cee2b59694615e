"""
HTTP API for program and transaction audits.
"""
