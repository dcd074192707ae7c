"""Packaged data files (default class exclusions)."""
