"""
Package manifest handling for Windows Config Builder.

This package contains the descriptor types for the curated package list and
the loader that decodes ``packages.json`` into them.
"""
