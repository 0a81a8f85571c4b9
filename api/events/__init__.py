"""
Public event lookup by slug.
"""
