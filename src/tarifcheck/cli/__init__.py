"""
tarifcheck CLI - command line front-end for reconciliation runs.
"""

from .main import main

__all__ = ['main']
