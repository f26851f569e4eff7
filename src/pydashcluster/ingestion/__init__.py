"""Ingestion layer.

Turns raw sensor deliveries into ordered, typed samples for the fusion engines.
"""
