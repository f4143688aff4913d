"""AbjaR RH package (Absen - Jadwal - Reminder).

This package is organized by feature modules (users, schedules, tasks,
attendance, dashboard, notifications) with a thin Flask controller layer
and service/repository layers underneath.
"""
