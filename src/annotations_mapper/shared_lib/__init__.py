"""Shared building blocks: logging, correlation ids and service exceptions."""
