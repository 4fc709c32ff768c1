"""
boxlabel - A desktop tool for drawing YOLO bounding-box annotations.

Built with PyQt6. Boxes are edited over a folder of images and saved
next to each image in the darknet/YOLO text format.
"""

__version__ = "1.0.0"
__author__ = "boxlabel Team"
