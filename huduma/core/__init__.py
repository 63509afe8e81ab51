"""
Domain layer: models, repositories and services.
"""
