"""
Test suite for the Healthcare Appointment Booking service.

Contains unit tests for the access rules and domain services, and API tests
for the HTTP surface.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
