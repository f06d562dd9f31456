"""Device Registry Module.

This module provides the backend for humidity-sensing devices:
- Sign up and log in with a username and password
- Keep an ordered list of embedded devices per user
- Record humidity readings for each device
- Announce new devices and humidity changes on MQTT topics

Architecture: Clean Architecture with Hexagonal (Ports & Adapters)
"""
