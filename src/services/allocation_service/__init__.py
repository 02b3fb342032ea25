# src/services/allocation_service/__init__.py
"""
Allocation Service: принятие грузов водителями.
"""
