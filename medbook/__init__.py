"""
MedBook

A FastAPI service for booking hospital appointments: patients book, edit and
cancel appointments with doctors; doctors confirm, complete or cancel them.
"""

__version__ = "1.0.0"
