"""LIFF alumni registration view hosted on aiohttp."""

__version__ = "1.0.0"
