"""
Models — Share receipts.
"""
