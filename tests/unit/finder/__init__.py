"""
Tests for the executable finder modules.
"""
