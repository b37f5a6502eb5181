"""
Day Tracker backend.

A FastAPI service that keeps one JSON record per calendar date (time blocks,
day plan, custom categories) in either a local directory of JSON files or a
Turso/SQL database.
"""

__version__ = "0.1.0"
