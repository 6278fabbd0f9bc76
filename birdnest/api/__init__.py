"""
API module for the NDZ monitor.

Provides REST endpoints for:
- Current no-fly zone violations
- Monitor status
"""

from birdnest.api.violations import violations_bp

__all__ = ['violations_bp']
