"""
Birdnest NDZ Monitor.

Watches a drone position feed for drones entering the no-fly zone around a
bird nest, and keeps a 10-minute rolling list of violations with the
offending pilots' contact details.

Modules:
    api/         REST endpoint serving the violation list
    ingestion/   Drone feed client, pilot registry client and monitor loop
    geometry.py  Distance of drones to the no-fly zone center
    models.py    Violation and PilotInfo records
    store.py     Thread-safe in-memory violation store
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
