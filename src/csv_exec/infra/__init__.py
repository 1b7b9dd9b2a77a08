"""Collaborators at the edges of a run: streams and processes."""
