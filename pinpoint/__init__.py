"""
Pinpoint backend.

Location resolution engine for property records: plus-code codec, source
priority resolver, conflict detection and the interactive position editor.
"""

__version__ = "1.0.0"
