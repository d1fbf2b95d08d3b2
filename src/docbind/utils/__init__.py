"""Utility helpers for docbind."""
