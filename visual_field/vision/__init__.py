"""
Vision modules: building segments from segmentation output
"""
