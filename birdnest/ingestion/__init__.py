"""
Data ingestion module for the NDZ monitor.

Handles polling the drone feed, resolving pilots from the registry,
and merging sightings into the violation store.
"""

from birdnest.ingestion.drone_feed import DroneFeedClient, DroneReading, DroneSnapshot
from birdnest.ingestion.pilot_resolver import PilotResolver
from birdnest.ingestion.monitor import ViolationMonitor

__all__ = ['DroneFeedClient', 'DroneReading', 'DroneSnapshot', 'PilotResolver', 'ViolationMonitor']
