"""Launchpad service application."""
