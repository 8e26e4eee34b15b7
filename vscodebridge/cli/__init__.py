"""CLI module for vscodebridge."""
