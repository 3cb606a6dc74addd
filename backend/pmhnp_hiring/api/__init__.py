"""
HTTP API Package
"""
