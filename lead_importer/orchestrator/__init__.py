"""Workflow orchestration for prospecting searches and their imports."""

from .service import ImportOrchestrator

__all__ = ["ImportOrchestrator"]
