"""
Shared models used across the API and the client.
"""
