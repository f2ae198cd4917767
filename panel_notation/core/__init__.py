"""Core engine: canonical services, dialects, settings and errors."""
