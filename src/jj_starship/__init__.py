"""Unified git/jj Starship prompt module."""
