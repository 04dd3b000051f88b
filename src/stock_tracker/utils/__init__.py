"""Utilities package for the stock tracker application."""
