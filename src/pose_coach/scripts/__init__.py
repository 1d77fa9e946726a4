"""
Command-line tools: exercise data validation and keypoint replay.
"""
