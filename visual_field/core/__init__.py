"""
Core modules for the visual field library
"""
