"""Observability utilities for the interview coach."""
from .logger import log_error, log_event, log_file_path, log_interaction, log_transition

__all__ = ["log_error", "log_event", "log_file_path", "log_interaction", "log_transition"]
