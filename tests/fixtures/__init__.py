"""Centralized, importable test fixtures package."""
