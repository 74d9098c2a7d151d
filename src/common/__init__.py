"""Shared helpers for logging and synchronous HTTP."""
