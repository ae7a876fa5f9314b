"""Text module for macro expansion.

This package contains:
- macro: MacroExpansion templates and their literal and variable segments
"""
