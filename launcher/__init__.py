"""
Local package store for Terasology game releases and their managed runtimes.
"""
