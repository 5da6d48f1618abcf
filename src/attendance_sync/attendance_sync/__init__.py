"""Attendance Sync package.

This package is organized by feature modules (vendor, mappings, attendance,
sync, ...) with a thin Flask controller layer and service/repository layers.
"""
