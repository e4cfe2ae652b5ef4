"""
HTTP API layer for the Eye Pressure Dashboard.
"""
