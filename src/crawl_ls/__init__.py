"""
crawl-ls server package.

Resolves links under the editor cursor into locally cached Markdown pages,
or asks the editor to open them externally.
"""

__version__ = "0.1.0"
