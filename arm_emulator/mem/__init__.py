"""Flat main memory."""
