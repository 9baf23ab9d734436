"""
Fetching, converting and caching of linked web pages.
"""
