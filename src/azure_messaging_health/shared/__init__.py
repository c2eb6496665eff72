"""Shared utilities: credentials, exceptions, logging and metrics."""
