"""Venue timekeeping engine.

This package is organized by feature modules (business_day, attendance,
payroll, approvals) with SOLID service/repository layers over MySQL.
"""
