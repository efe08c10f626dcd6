"""
Parsers for placement problem files and run configuration.
"""
