# src/services/location_ingest/__init__.py
"""
Location Ingest: приём геолокации от водителей.
"""
