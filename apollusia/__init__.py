"""Apollusia: a scheduling poll service for finding a common meeting date."""
