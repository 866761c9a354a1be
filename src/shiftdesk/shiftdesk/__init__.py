"""Shiftdesk package.

Token-based shift submission and conflict-guarded shift assignment, organized
by feature modules (tokens, submissions, schedules, ...) with a thin Flask
controller layer over service/repository layers.
"""
