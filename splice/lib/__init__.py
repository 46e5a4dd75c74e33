"""Core matching, streaming and resolution for splice."""
