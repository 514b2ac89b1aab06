"""
Access control feature module.

Role-based visibility and mutation rules for users, organizations and orders.
"""
