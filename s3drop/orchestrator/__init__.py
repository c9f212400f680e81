"""Orchestrator package - coordinates upload and delete workflows."""
from .accept import AcceptFilter, FileCollector
from .core import UploadOrchestrator

__all__ = ["UploadOrchestrator", "AcceptFilter", "FileCollector"]
