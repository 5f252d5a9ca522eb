"""Tests for the Veil client."""
