"""Team Attendance package.

This package is organized by feature modules (recurrence, seasons, attendance,
tags, ...) with a thin Flask controller layer and service/repository layers.
"""
