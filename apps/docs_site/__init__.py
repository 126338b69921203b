"""
Public documentation site for the LeetCode bot.
"""

from apps.docs_site.server import create_app, main

__all__ = ['create_app', 'main']
