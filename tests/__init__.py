"""Test package for the song quiz engine.

The engine is pure and deterministic given a seeded random source and a fake
clock, so every test here runs headlessly.  To run them, execute ``pytest``
from the project root.
"""
