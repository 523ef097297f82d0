"""Timetable & attendance core.

Organized by feature modules (timetable, sessions, students, instructors) with
a thin Flask controller layer over service/repository layers.
"""
