"""
Task tracker service - CRUD backend for task records.
"""
__version__ = "0.1.0"
