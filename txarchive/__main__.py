"""
Package entry point for txarchive.

    python -m txarchive transactions --bank ce
"""

from .main import run

if __name__ == "__main__":
    run()
