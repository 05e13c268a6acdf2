"""
Healthcare Appointment Booking

A FastAPI service where patients book appointments with doctors, doctors
complete them and attach medical records, with owner- and group-based
access rules on every record.
"""

__version__ = "1.0.0"
