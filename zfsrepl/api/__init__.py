"""
HTTP API for zfsrepl.
"""
