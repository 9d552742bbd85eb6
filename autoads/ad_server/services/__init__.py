"""
Domain services, one per concern, each holding the shared Database.
"""
