"""
Services
External sources (geocoding, device location) and logging
"""
