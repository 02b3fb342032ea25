# src/services/trip_monitor/__init__.py
"""
Trip Monitor: периодическая проверка активных поездок.
"""
