"""
Test suite for MedBook.

Contains unit tests for the appointment lifecycle and authorization gate,
and API tests for the HTTP routes.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
