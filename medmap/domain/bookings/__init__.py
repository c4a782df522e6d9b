"""Bookings domain - reservations and their payment redirects"""
