"""
Controllers connecting views to the edit model.
"""
from .annotation_controller import AnnotationController

__all__ = ['AnnotationController']
