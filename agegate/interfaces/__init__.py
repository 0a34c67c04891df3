"""Delivery layers (HTTP)."""
