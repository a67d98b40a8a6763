"""Foundation - building blocks shared by the runtime.

Contains: failure categories, error handling, config.
"""
