"""
Card Sheet Splitter: идентификация карт на листах и организация страниц
"""

__version__ = "1.0.0"
