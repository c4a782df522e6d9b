"""Payments domain - PayFast redirects and ITN webhook processing"""
