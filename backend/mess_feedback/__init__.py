"""Mess hall meal feedback service."""
