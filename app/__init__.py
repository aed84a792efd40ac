"""
Health First Server

A FastAPI backend for provider and patient registration, authentication,
and provider availability with generated appointment slots.
"""

__version__ = "1.0.0"
