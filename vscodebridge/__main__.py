"""
Entry point for running vscodebridge as a module: python -m vscodebridge
"""

from vscodebridge.cli.commands import app

if __name__ == "__main__":
    app()
