"""
ClinicQueue: walk-in clinic token queue service

Issues per-clinic, per-specialist daily queue tokens from a public QR form
and lets clinic staff call, progress and close them out.
"""

__version__ = "0.1.0"
__author__ = "ClinicQueue Team"
__description__ = "Walk-in clinic token queue service"
