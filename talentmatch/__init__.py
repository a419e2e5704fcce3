"""Talent match: score freelancer profiles against job offers."""

__version__ = "0.1.0"
