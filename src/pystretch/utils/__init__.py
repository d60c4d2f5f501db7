"""Utility functions and types for pyStretch.

This module contains the type definitions, custom exceptions and helper
routines used throughout the pyStretch package:

- Type annotations for walker arrays and the density/observer protocols
- Custom exception classes for configuration errors
- Autocorrelation time estimation
"""
