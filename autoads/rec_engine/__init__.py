"""
Selection pipeline for placements: retrieval, filtering, ranking.
"""
