"""Deezify application layer."""
