"""
API Module
==========

This module provides the REST API server exposing the degradation
estimator to web clients.

Routes:
    /api/report - One-shot degradation report
    /api/panels - Panel management, tests and profiles
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
