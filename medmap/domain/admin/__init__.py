"""Admin domain - doctor approvals and platform overview"""
