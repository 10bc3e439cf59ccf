"""
Tests package - test suite for the Kinde provisioner.

Contains:
- unit/: Unit tests for individual components
- unit/services/: Appliers, sequencer and driver
"""
