"""Core utilities shared across llmbridge components."""
