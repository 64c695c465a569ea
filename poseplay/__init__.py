"""
Poseplay: pose-driven calibration and particle animation.
"""

__version__ = "0.1.0"
