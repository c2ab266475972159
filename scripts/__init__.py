"""
Scripts Package.

This package contains operational scripts for the name alert service.

Scripts:
- bootstrap_db: Alert store initialization
"""

# Scripts are meant to be run directly, not imported
