"""
Test suite for rebase-pool

Contains:
- tests/unit/          : Unit tests for individual modules and the StakingPool facade
"""
