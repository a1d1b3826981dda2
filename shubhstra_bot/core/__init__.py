"""
Core enums, models and exceptions.
"""
