"""Doctors domain - discovery, enrollment and weekly schedules"""
