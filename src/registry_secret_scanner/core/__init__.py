"""Core registry types, session and authentication."""
