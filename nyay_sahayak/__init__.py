"""
Nyay Sahayak - An AI legal assistant for Indian law
====================================================
This package provides a Flask-based backend for a legal-education app:
1. Chat with a legal assistant, streamed as it is generated
2. Summaries of and questions about uploaded document images
3. Learning modules with quizzes and progress tracking
All text can be localized into Indian languages through a per-session
translation cache.

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Nyay Sahayak Team"

from nyay_sahayak.app import create_app, run_server

__all__ = ["create_app", "run_server", "__version__"]
