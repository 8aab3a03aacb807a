"""Shared helpers: tracing, logging, browser launching."""
