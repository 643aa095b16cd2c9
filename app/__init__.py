"""Notification relay application package.

Ensures the local ``app`` package takes precedence over similarly named
dependencies that might be installed in the environment.
"""
