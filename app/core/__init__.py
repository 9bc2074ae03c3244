"""
Core architecture components for the consultation scheduling service
"""
