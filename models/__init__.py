"""Data models and utility functions.

This package contains:
- light: Light aggregate, colour intents and state requests
- colour: Colour temperature and HSV to RGB conversion
- types: TypedDicts for the persisted document
- utils: Utility functions (similarity_score, find_similar_strings, etc.)
"""
