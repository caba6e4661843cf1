"""Typed payload models."""
