"""
Shared configuration, logging, persistence and errors.
"""
