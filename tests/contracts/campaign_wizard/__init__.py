"""
Campaign Wizard Contract Module

This module contains:
- data_contract.py: test data factories and builders for wizard snapshots,
  drafts, templates and media files
"""
