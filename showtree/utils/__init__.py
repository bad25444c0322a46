"""Helpers shared by the showtree core and CLI."""
