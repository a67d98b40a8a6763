"""Runtime - retry decisions, back-off and cancellation.

Contains: retry, concurrency.
"""
