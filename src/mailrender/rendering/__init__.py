"""RFC822 document reconstruction."""

from .assembler import MessageAssembler
from .attachments import AttachmentEmitter
from .body import BodyPartEncoder
from .boundaries import BoundaryAllocator, seed_process_random
from .headers import HeaderAnalyzer

__all__ = [
    "AttachmentEmitter",
    "BodyPartEncoder",
    "BoundaryAllocator",
    "HeaderAnalyzer",
    "MessageAssembler",
    "seed_process_random",
]
