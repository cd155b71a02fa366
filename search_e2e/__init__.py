"""Cross-engine end-to-end search scenario for the Playwright movies demo app."""

__version__ = "0.1.0"
