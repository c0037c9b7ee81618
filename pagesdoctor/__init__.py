"""Diagnose and repair GitHub Pages deployments."""

from .diagnostics import Diagnostician
from .models import DiagnosticReport, Issue, Severity
from .remediation import Remediator

__all__ = ["DiagnosticReport", "Diagnostician", "Issue", "Remediator", "Severity"]

__version__ = "1.0.0"
