"""Cluck hour-log service.

This package is organized by feature modules (hours, clock, members, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
