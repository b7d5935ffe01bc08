"""Aggregate marketplace reports for hosts and platform staff."""
