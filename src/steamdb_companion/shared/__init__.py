"""Shared utilities: errors, logging, constants, models and cache keys."""
