"""
Shared helpers for HTTP responses, file names and display formatting.
"""
