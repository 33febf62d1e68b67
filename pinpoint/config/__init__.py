"""
Configuration for the Pinpoint backend.
"""
