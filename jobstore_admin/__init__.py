"""
Job Store Admin module.

Command-line administration of stored job definitions.
"""
