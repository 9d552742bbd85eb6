"""
API and domain schemas.
"""
