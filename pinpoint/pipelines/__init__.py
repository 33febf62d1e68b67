"""
Pipelines
Location resolution and distance calculation
"""
