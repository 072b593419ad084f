"""
Prefect flows.

Flows:
- isochrone: normalize -> cache lookup -> provider -> cache write

Usage (local):
    commute-isochrones isochrone --provider google --mode walk ...

Usage (Prefect):
    prefect server start  # Optional, for dashboard
"""
