"""Catalogue des pays et devises / Country currency catalog."""
