"""
Convenience entry point for running repeatbooker directly.

Usage: python -m repeatbooker [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
