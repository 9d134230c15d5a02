"""
Image processing utilities.

This package provides the pixel-level backend used by segments:
- processors: submatrices, resizing, canvases, masked copies
- converters: base64 and PIL conversions for reporting
"""
