"""
Core Infrastructure.

Configuration loading, structured logging, exception types, and resilience
helpers shared by every other package.
"""
