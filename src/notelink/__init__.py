"""
NoteLink Backend - note sharing with live notifications and direct messaging.

REST API on FastAPI; presence and real-time delivery over Socket.IO.
"""

__version__ = "1.0.0"
