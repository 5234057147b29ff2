"""Unified storage replication across Ceph, Trident and PowerStore backends."""

__version__ = "0.1.0"
