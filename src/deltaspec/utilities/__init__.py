"""
deltaspec.utilities - File I/O helpers
"""
