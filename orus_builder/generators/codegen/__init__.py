"""Prompt-to-code generation package."""
