"""
Vaccine Scheduler

Patients and caregivers register, log in and coordinate vaccination
appointments against a shared inventory of vaccine doses.
"""

__version__ = "1.0.0"
