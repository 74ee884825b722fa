"""
API — Flask app exposing the share pipeline.
"""
