"""Frontends - user interfaces for llmbridge.

Submodules:
    cli/    Command-line interface
"""
