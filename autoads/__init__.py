"""
AutoAds - ad serving and campaign economics for a car marketplace.
"""

__version__ = "0.1.0"
