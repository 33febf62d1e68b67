"""
Location Pipeline
Codec, source resolver and interactive position editor for property pins.

Submodules are imported directly (services.geocoding depends on
location.types, so nothing is re-exported here).
"""
