"""Scalable Capital export converter."""
