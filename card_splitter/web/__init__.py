"""
Web module for Card Sheet Splitter
"""

from .utils import read_uploaded_file, get_session
from .routes import configure_routes

__all__ = [
    'read_uploaded_file',
    'get_session',
    'configure_routes'
]
