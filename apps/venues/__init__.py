"""Venues app package.

Venues, their courts and the weekly operating windows that say when a
court can be booked.
"""
