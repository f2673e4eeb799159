"""Timeclock package.

Attendance & reporting engine organized by feature modules (attendance,
reports, requests, notifications, ...) over a document-store gateway, with a
thin Flask controller layer on top.
"""
