"""
Utility functions for the upload server.

File removal helpers and router helpers.
"""
