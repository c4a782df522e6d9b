"""MedMap API - doctor discovery, appointment booking and PayFast payments"""
