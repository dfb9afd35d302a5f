"""
Tests for the driver acquisition modules.
"""
