"""
Campaign Wizard Service

Campaign configuration wizard providing:
- Step-by-step campaign configuration with per-step validation
- Debounced draft autosave and resumable drafts
- Coverage (reach/impressions/CPM) estimation from location specs
- Balance gating of the finalize transition
- Budget suggestions, ROI simulation and KPI presets
"""

__version__ = "1.0.0"
__service__ = "campaign_wizard_service"
