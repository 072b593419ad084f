"""
Shared utilities for talking to travel-time backends.

- http.py - ``requests`` session with timeout and no retries
"""
