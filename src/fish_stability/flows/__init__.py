"""
Prefect flows for the survey pipeline.

Flows:
- clean: Normalize raw SBC/MCR extracts into cleaned long tables
- analyze: Build species matrices, diversity, subsets and variability partitions

Usage (local):
    python -m fish_stability.flows.clean SBC=data/in/sbc_fish.csv MCR=data/in/mcr_fish.csv
    python -m fish_stability.flows.analyze

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    fish-stability run --sbc data/in/sbc_fish.csv --mcr data/in/mcr_fish.csv
"""
