"""Frame pipeline orchestrating operations and detection"""

from .frame_pipeline import FramePipeline, aux_flag_for, format_detection, NO_DETECTOR

__all__ = ['FramePipeline', 'aux_flag_for', 'format_detection', 'NO_DETECTOR']
