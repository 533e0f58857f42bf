"""Reporting module - console verification reports."""

from .console import ConsoleReporter

__all__ = ["ConsoleReporter"]
