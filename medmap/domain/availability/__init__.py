"""Availability domain - bookable slots from weekly schedules"""
