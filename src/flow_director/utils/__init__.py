"""
Utilities - configuration, game registry and factories.
"""
