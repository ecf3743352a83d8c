"""Test suite for the benchrunner project.

Tests are organized to mirror the package structure.
"""
