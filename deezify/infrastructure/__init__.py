"""Deezify infrastructure layer - HTTP connectors, caches and the CLI."""
