"""
CLI command modules.
"""
