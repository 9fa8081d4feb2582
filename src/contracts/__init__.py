"""Shared wire-protocol constants."""
