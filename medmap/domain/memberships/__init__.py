"""Memberships domain - premium plan checkout and activation"""
