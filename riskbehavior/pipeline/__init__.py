"""
RiskBehavior input pipeline.

Components:
- validator: structural, range and referential checks for Activity/Risk records
"""
