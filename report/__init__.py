"""
Report package: render impact results as text, Markdown, CSV, JSON or HTML.
"""

from .renderer import render

__all__ = ["render"]
