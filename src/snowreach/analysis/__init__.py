"""
Analysis stages.

Reprojection, elevation sampling, threshold filtering, buffering and the
spatial join between station buffers and cities.
"""
