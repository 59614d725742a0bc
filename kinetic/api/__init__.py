"""
HTTP API blueprints for Kinetic.
"""
