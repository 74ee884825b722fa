"""
Configuration — Credentials and pipeline settings.
"""
