"""
songdl-cli: an interactive terminal client that fetches songs through an
external downloader and files them into a music library.
"""

__version__ = "0.1.0"
