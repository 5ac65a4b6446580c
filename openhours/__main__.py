"""
Convenience entry point for running openhours as a module.

Usage: python -m openhours [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
