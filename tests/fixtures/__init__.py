"""Shared test fixtures and synthetic data builders."""
