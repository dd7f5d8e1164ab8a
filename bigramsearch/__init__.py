"""
Bigram-indexed substring search over a directory of text files.
"""

__version__ = "0.1.0"
