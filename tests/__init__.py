"""
Test suite for the Health First Server.

Unit tests for slot generation and overlap detection, service tests for the
availability lifecycle and queries, and API tests for every router.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
