"""Tests for skill-resolver."""
