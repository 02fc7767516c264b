"""fencelint - lint fenced code blocks in Markdown documentation."""

__version__ = "0.1.0"
