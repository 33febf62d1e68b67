"""
Mapping Pipeline
Geographic calculations shared by the location pipeline and the API
"""
