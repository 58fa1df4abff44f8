"""Runnable examples built on the fixture engine."""
