"""Shared utilities: logging decorator and config validation."""
