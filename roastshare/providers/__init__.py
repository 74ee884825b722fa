"""
Providers — Image optimization and platform media clients.
"""
