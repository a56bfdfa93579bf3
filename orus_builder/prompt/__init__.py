"""Prompt processing engines: parsing, classification, validation, context, ambiguity, requirements, conversation and history."""
