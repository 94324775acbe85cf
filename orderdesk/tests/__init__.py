"""Tests for orderdesk."""
