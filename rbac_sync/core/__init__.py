"""
Core Module

Shared components including:
- Configuration management
- Logging configuration
- Exception hierarchy
"""
