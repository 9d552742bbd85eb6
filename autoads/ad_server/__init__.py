"""
HTTP application: routers and services.
"""
