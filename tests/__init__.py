"""
Test suite for the tiered pre-sale token engine

Contains:
- tests/unit/          : Unit tests for individual modules
"""
